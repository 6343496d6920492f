# scripts/export_period_report.py
"""
사용자 1명의 기간 통계 리포트.

    python -m scripts.export_period_report --user alice --period month

출력 (기본: var/reports/<user>_<period>/)
  - report.xlsx          : trend / distribution 시트
  - distribution.png     : 감정 분포 (사전 색상)
  - trend.png            : 최근 7개 추이 (-5 아래는 자름)
"""
from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from moodjournal.domain.aggregation import emotion_percentages, trend_series
from moodjournal.domain.lexicon import EmotionLexicon
from moodjournal.domain.models import PeriodStatistics
from moodjournal.infra.journal_repo import YamlJournalStore
from moodjournal.infra.paths import REPORTS_DIR, ensure_dir
from moodjournal.services.journal_service import JournalService


def trend_frame(stats: PeriodStatistics) -> pd.DataFrame:
    return pd.DataFrame(
        [{"date": t.date, "score": t.score, "emotion": t.emotion} for t in stats.trend_data],
        columns=["date", "score", "emotion"],
    )


def distribution_frame(stats: PeriodStatistics) -> pd.DataFrame:
    pct = emotion_percentages(stats)
    rows = [
        {"emotion": name, "count": count, "percent": pct.get(name, 0.0)}
        for name, count in stats.emotion_distribution.items()
    ]
    df = pd.DataFrame(rows, columns=["emotion", "count", "percent"])
    return df.sort_values("count", ascending=False, kind="stable").reset_index(drop=True)


def write_excel(out_xlsx: Path, stats: PeriodStatistics) -> None:
    ensure_dir(out_xlsx.parent)
    summary = pd.DataFrame(
        [
            {
                "average_score": stats.average_score,
                "total_entries": stats.total_entries,
                "most_frequent_emotion": stats.most_frequent_emotion,
                "sentiment": stats.sentiment,
            }
        ]
    )
    with pd.ExcelWriter(out_xlsx, engine="openpyxl") as writer:
        summary.to_excel(writer, sheet_name="summary", index=False)
        trend_frame(stats).to_excel(writer, sheet_name="trend", index=False)
        distribution_frame(stats).to_excel(writer, sheet_name="distribution", index=False)


def write_distribution_chart(out_png: Path, stats: PeriodStatistics, lexicon: EmotionLexicon) -> bool:
    df = distribution_frame(stats)
    if df.empty:
        return False
    ensure_dir(out_png.parent)
    plt.figure()
    plt.pie(
        df["count"],
        labels=[f"{lexicon.icon(e)} {e}" for e in df["emotion"]],
        colors=[lexicon.color(e) for e in df["emotion"]],
        autopct="%1.1f%%",
    )
    plt.tight_layout()
    plt.savefig(out_png, dpi=180)
    plt.close()
    return True


def write_trend_chart(out_png: Path, stats: PeriodStatistics) -> bool:
    points = trend_series(stats)
    if not points:
        return False
    ensure_dir(out_png.parent)
    plt.figure()
    plt.plot([p.date for p in points], [p.score for p in points], marker="o")
    plt.axhline(0, color="#cccccc", linewidth=1)
    plt.xticks(rotation=45, ha="right")
    plt.tight_layout()
    plt.savefig(out_png, dpi=180)
    plt.close()
    return True


def export_report(
    user_id: str,
    period: str,
    out_dir: Path,
    service: Optional[JournalService] = None,
    today: Optional[date] = None,
) -> list:
    service = service or JournalService()
    stats = service.period_statistics(user_id, period, today=today)

    written = []
    out_xlsx = out_dir / "report.xlsx"
    write_excel(out_xlsx, stats)
    written.append(out_xlsx)

    if write_distribution_chart(out_dir / "distribution.png", stats, service.analyzer.lexicon):
        written.append(out_dir / "distribution.png")
    if write_trend_chart(out_dir / "trend.png", stats):
        written.append(out_dir / "trend.png")
    return written


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--user", required=True)
    ap.add_argument("--period", default="week", choices=["week", "month", "year"])
    ap.add_argument("--journal_dir", default=None)
    ap.add_argument("--out_dir", default=None)
    args = ap.parse_args()

    store = YamlJournalStore(Path(args.journal_dir)) if args.journal_dir else YamlJournalStore()
    out_dir = Path(args.out_dir) if args.out_dir else REPORTS_DIR / f"{args.user}_{args.period}"

    written = export_report(args.user, args.period, out_dir, service=JournalService(store))

    print("[report] wrote:")
    for p in written:
        print(" -", p)


if __name__ == "__main__":
    main()
