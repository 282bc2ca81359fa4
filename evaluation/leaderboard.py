# evaluation/leaderboard.py

import argparse
import csv
from collections import defaultdict

from backend.config import load_config
from backend.moves import GameResult
from backend.storage import GameStore


def summarize_player_stats(summaries):
    leaderboard = defaultdict(lambda: {"wins": 0, "games": 0, "total_moves": 0})

    for summary in summaries:
        key = (summary.player or "anonymous", summary.size)
        leaderboard[key]["games"] += 1
        leaderboard[key]["total_moves"] += summary.total_moves
        if summary.result == GameResult.WIN:
            leaderboard[key]["wins"] += 1

    return leaderboard


def _rows(leaderboard):
    for (player, size), stats in sorted(leaderboard.items()):
        games = stats["games"]
        win_rate = stats["wins"] / games if games else 0
        avg_moves = stats["total_moves"] / games if games else 0
        yield player, f"{size}x{size}", games, win_rate, avg_moves


def display_leaderboard(leaderboard):
    print("\nMinesweeper Leaderboard\n")
    header = f"{'Player':<20} {'Field':<8} {'Games':<7} {'Win Rate':<10} {'Avg Moves'}"
    print(header)
    print("-" * len(header))

    for player, field, games, win_rate, avg_moves in _rows(leaderboard):
        print(f"{player:<20} {field:<8} {games:<7} {win_rate:<10.2%} {avg_moves:.1f}")


def export_leaderboard_csv(leaderboard, path="leaderboard.csv"):
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Player", "Field", "Games", "Win Rate", "Avg Moves"])
        for player, field, games, win_rate, avg_moves in _rows(leaderboard):
            writer.writerow([player, field, games, f"{win_rate:.2%}", f"{avg_moves:.1f}"])


def export_leaderboard_markdown(leaderboard, path="leaderboard.md"):
    with open(path, "w") as f:
        f.write("## Minesweeper Leaderboard\n\n")
        f.write("| Player | Field | Games | Win Rate | Avg Moves |\n")
        f.write("|--------|-------|-------|----------|-----------|\n")
        for player, field, games, win_rate, avg_moves in _rows(leaderboard):
            f.write(f"| {player} | {field} | {games} | {win_rate:.2%} | {avg_moves:.1f} |\n")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=None, help="Path to the games database (defaults to the config value)")
    parser.add_argument("--config", default=None, help="Path to the game config YAML")
    args = parser.parse_args()

    store = GameStore(args.db or load_config(args.config)["storage"]["path"])
    leaderboard = summarize_player_stats(store.list())
    display_leaderboard(leaderboard)
    export_leaderboard_csv(leaderboard)
    export_leaderboard_markdown(leaderboard)
    print("\nLeaderboard saved as CSV and Markdown.")


if __name__ == "__main__":
    main()
