import argparse
import datetime
import json
import logging
from typing import Optional

from catalog import PREDEFINED_PLANS
from config import YamlConfig
from db import ProgressRepository, TrainingPlanRepository
from planner_service import SplitGenerator
from progress_service import ProgressService, StaticAuthProvider
from settings_schema import SettingsSchema
from stats_service import StatisticsService


def load_settings(yaml_path: str, db_path: Optional[str] = None) -> SettingsSchema:
    settings = YamlConfig(yaml_path).settings()
    if db_path is not None:
        settings = settings.model_copy(update={"db_path": db_path})
    logging.basicConfig(level=settings.log_level)
    return settings


def print_split(days: int, fallback: int = 4) -> None:
    plan = SplitGenerator(fallback).generate(days)
    for index, day in enumerate(plan.split, start=1):
        print(f"Day {index}: {day.name}")
        for group, patterns in day.muscle_groups.items():
            names = ", ".join(p.standard.name for p in patterns)
            print(f"  {group}: {names}")


def seed_plans(db_path: str) -> None:
    plans = TrainingPlanRepository(db_path).ensure_defaults(PREDEFINED_PLANS)
    print(f"{len(plans)} training plans available")


def print_history(settings: SettingsSchema, user_id: str) -> None:
    service = ProgressService(StaticAuthProvider(user_id), settings).load()
    for entry in service.history:
        names = ", ".join(ex.name for ex in entry.logged_exercises)
        print(f"{entry.key}  {service.plan_day_name(entry)}  {names}")


def print_stats(settings: SettingsSchema, user_id: str) -> None:
    service = ProgressService(StaticAuthProvider(user_id), settings).load()
    overview = StatisticsService(service.progress).overview(datetime.date.today())
    progress = service.level_progress()
    overview["level"] = progress.level
    overview["experience"] = progress.experience
    print(json.dumps(overview, indent=2))
    for achievement in service.achievements():
        mark = "x" if achievement.completed else " "
        print(f"[{mark}] {achievement.title}: {achievement.progress:g}/{achievement.target:g}")


def export_history(db_path: str, user_id: str, out_path: str) -> None:
    entries = ProgressRepository(db_path, user_id).history()
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump([e.to_document() for e in entries], f, indent=2)


def demo_data(settings: SettingsSchema, user_id: str) -> None:
    """Log one demo session if the user has no history yet."""
    service = ProgressService(StaticAuthProvider(user_id), settings).load()
    if service.history:
        print("Ledger already contains sessions")
        return
    draft = service.start_session(service.selected_plan.days[0].id)
    draft.body_weight = 80.0
    for index, exercise in enumerate(draft.exercises):
        for set_index in range(len(exercise.logged_sets)):
            draft.update_set(index, set_index, weight=60.0, reps=8, rir=2)
    result = service.submit(draft)
    print(f"Demo session logged, +{result.reward.experience_gained} XP")


def main() -> None:
    parser = argparse.ArgumentParser(description="Training utility commands")
    parser.add_argument("--yaml", default="settings.yaml")
    parser.add_argument("--db", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    split = sub.add_parser("split")
    split.add_argument("--days", type=int, default=3)

    sub.add_parser("seed")

    hist = sub.add_parser("history")
    hist.add_argument("--user", required=True)

    stats = sub.add_parser("stats")
    stats.add_argument("--user", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--user", required=True)
    exp.add_argument("--out", default="history.json")

    demo = sub.add_parser("demo")
    demo.add_argument("--user", required=True)

    args = parser.parse_args()
    settings = load_settings(args.yaml, args.db)

    if args.cmd == "split":
        print_split(args.days, settings.fallback_weekly_availability)
    elif args.cmd == "seed":
        seed_plans(settings.db_path)
    elif args.cmd == "history":
        print_history(settings, args.user)
    elif args.cmd == "stats":
        print_stats(settings, args.user)
    elif args.cmd == "export":
        export_history(settings.db_path, args.user, args.out)
    elif args.cmd == "demo":
        demo_data(settings, args.user)


if __name__ == "__main__":
    main()
