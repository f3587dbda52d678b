# beymeta/thresholds.py

# z for a ~95% confidence interval
WILSON_Z = 1.96

PART_TYPES = ('blade', 'ratchet', 'bit')

FINISH_TYPES = ('Spin Finish', 'Burst Finish', 'Over Finish', 'Extreme Finish')
FINISH_POINTS = {
    'Spin Finish': 1,
    'Burst Finish': 2,
    'Over Finish': 2,
    'Extreme Finish': 3,
}
UNKNOWN_FINISH = 'Unknown'

# League overview
TOP_PLAYERS_LIMIT = 4

# Tournament statuses as stored upstream
TOURNAMENT_STATUSES = ('upcoming', 'active', 'completed')
