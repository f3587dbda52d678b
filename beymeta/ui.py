# beymeta/ui.py

from typing import List, Dict, Any, Optional

from beymeta.table import StatTable
from beymeta.thresholds import FINISH_TYPES, PART_TYPES


class TerminalUI:
    """Simple terminal-based UI."""

    MENU_OPTIONS = (
        "Select tournament",
        "Part meta tables",
        "Builds using a part",
        "Matches for a build",
        "Player card",
        "League overview",
        "Export part table (CSV)",
        "Sync hosted store to local mirror",
        "Exit",
    )

    def show_menu(self, tournament_label: Optional[str] = None) -> str:
        """Show main menu and get validated user choice."""
        count = len(self.MENU_OPTIONS)
        print("\n" + "="*50)
        print("BEYMETA - League Meta Analyzer")
        if tournament_label:
            print(f"Tournament: {tournament_label}")
        print("="*50)
        for i, label in enumerate(self.MENU_OPTIONS, 1):
            print(f"{i}. {label}")
        print("="*50)

        valid = [str(i) for i in range(1, count + 1)]
        while True:
            choice = input(f"Choose an option (1-{count}): ").strip()
            if choice in valid:
                return choice
            print(f"Error: Please enter a number between 1 and {count}")

    def choose_from(self, title: str, options: List[str]) -> Optional[int]:
        """Numbered pick list. Returns the chosen index, or None on blank input."""
        if not options:
            self.show_error(f"No {title.lower()} available")
            return None

        print("\n" + "-"*50)
        print(f"{title}:")
        for i, option in enumerate(options, 1):
            print(f"  {i}. {option}")
        print("-"*50)

        while True:
            raw = input("Your selection (Enter to cancel): ").strip()
            if not raw:
                return None
            if raw.isdigit() and 1 <= int(raw) <= len(options):
                return int(raw) - 1
            print(f"Error: Please select a number between 1 and {len(options)}")

    def choose_tournament(self, tournaments: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        labels = [
            f"{t.get('name')} [{t.get('status', 'unknown')}] {t.get('tournament_date') or ''}".rstrip()
            for t in tournaments
        ]
        index = self.choose_from("Tournaments", labels)
        return tournaments[index] if index is not None else None

    def choose_part_type(self) -> Optional[str]:
        index = self.choose_from("Part types", [p.capitalize() for p in PART_TYPES])
        return PART_TYPES[index] if index is not None else None

    def ask(self, prompt: str) -> str:
        return input(f"{prompt}: ").strip()

    def show_table(self, title: str, table: StatTable, empty_message: str = "No data"):
        """Print a StatTable with column widths fitted to its contents."""
        print("\n" + "="*50)
        print(title)
        print("="*50)
        if not len(table):
            print(empty_message)
            return

        rows = table.display_rows()
        headers = table.headers
        widths = [
            max(len(headers[i]), *(len(row[i]) for row in rows))
            for i in range(len(headers))
        ]
        print("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
        print("-" * (sum(widths) + 2 * (len(widths) - 1)))
        for row in rows:
            print("  ".join(cell.ljust(w) for cell, w in zip(row, widths)))

    def show_player_card(self, summary: Dict[str, Any], breakdown: Dict[str, List[Dict[str, Any]]]):
        """Display a player's tournament card."""
        print("\n" + "="*50)
        print(f"PLAYER: {summary['name']}")
        print("="*50)
        print(f"Record:           {summary['wins']}W - {summary['losses']}L "
              f"({summary['win_rate'] * 100:.1f}% of {summary['matches']})")
        print(f"Points:           {summary['points']} ({summary['points_per_match']:.2f} pts/match)")
        mvb = summary['most_valuable_bey'] or 'N/A'
        print(f"Most Valuable:    {mvb} ({summary['most_valuable_bey_wins']} wins, "
              f"{summary['most_valuable_bey_points']} pts)")
        print(f"Favourite Finish: {summary['top_win_finish'] or 'N/A'}")
        print(f"Most Lost To:     {summary['top_loss_finish'] or 'N/A'}")

        short = [finish.split()[0] for finish in FINISH_TYPES]
        print("\n" + "-"*50)
        print("WINS BY FINISH")
        print("-"*50)
        print(f"{'Bey':<28} " + " ".join(f"{s:>7}" for s in short) + f" {'Wins':>5} {'Pts':>5}")
        for row in breakdown['wins']:
            counts = " ".join(f"{row[f]:>7}" for f in FINISH_TYPES)
            print(f"{row['bey']:<28} {counts} {row['wins']:>5} {row['points']:>5}")

        print("\n" + "-"*50)
        print("LOSSES BY FINISH")
        print("-"*50)
        print(f"{'Bey':<28} " + " ".join(f"{s:>7}" for s in short) + f" {'Loss':>5} {'Given':>5}")
        for row in breakdown['losses']:
            counts = " ".join(f"{row[f]:>7}" for f in FINISH_TYPES)
            print(f"{row['bey']:<28} {counts} {row['losses']:>5} {row['points_given']:>5}")
        print("="*50)

    def show_overview(self, overview: Dict[str, Any]):
        counts = overview['tournaments']
        print("\n" + "="*50)
        print("LEAGUE OVERVIEW")
        print("="*50)
        print(f"Tournaments:      {counts['total']} "
              f"({counts['completed']} completed, {counts['active']} active, {counts['upcoming']} upcoming)")
        print(f"Matches Recorded: {overview['matches_recorded']}")
        print(f"Players:          {overview['players']}")
        print("\nTop Win Rates:")
        if not overview['top_players']:
            print("  No completed matches yet")
        for i, row in enumerate(overview['top_players'], 1):
            print(f"  {i}. {row['player']:<20} {row['win_rate']:>3}% ({row['wins']}/{row['matches']})")
        print("="*50)

    def show_error(self, message: str):
        """Display error message."""
        print(f"\nERROR: {message}\n")

    def show_success(self, message: str):
        """Display success message."""
        print(f"\n{message}\n")
