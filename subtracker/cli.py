"""
Command-line interface for Subscription Tracker.

Operates on the configured data directory (SUBTRACKER_STORAGE_DATA_DIR,
default ~/.subtracker) unless --data-dir is given.
"""

import argparse
import sys
from pathlib import Path

from subtracker.billing import calculator
from subtracker.config import StorageSettings, get_settings
from subtracker.orchestrator import AppComponents, create_app_components
from subtracker.queries import month_name
from subtracker.services.csv_codec import CSVCodecError
from subtracker.services.reminders import InMemoryReminderCenter
from subtracker.services.storage import StorageError


def _money(amount) -> str:
    symbol = get_settings().reminders.currency_symbol
    return f"{symbol}{amount:,.2f}"


def _build(args) -> AppComponents:
    storage_settings = None
    if args.data_dir:
        storage_settings = StorageSettings(data_dir=Path(args.data_dir))
    return create_app_components(storage_settings=storage_settings)


def cmd_list(args, app: AppComponents):
    """Handle the 'list' subcommand."""
    subscriptions = app.store.search_subscriptions(args.search or "")
    if not subscriptions:
        print("No results found" if args.search else "No subscriptions yet")
        return

    for subscription in subscriptions:
        category = app.store.resolve_category(subscription)
        tags = ", ".join(t.name for t in app.store.resolve_tags(subscription))
        line = (
            f"{subscription.name:<30} {_money(subscription.cost):>12} "
            f"{subscription.billing_cycle.label:<14} "
            f"{subscription.next_payment_date.isoformat()}  "
            f"{subscription.status.label:<9} "
            f"{category.name if category else '-'}"
        )
        if tags:
            line += f"  [{tags}]"
        print(line)


def cmd_stats(args, app: AppComponents):
    """Handle the 'stats' subcommand."""
    stats = app.statistics
    print(f"Active subscriptions: {stats.active_count()} of {stats.subscription_count()}")
    print(f"Monthly cost:         {_money(stats.total_monthly_cost())}")
    print(f"Yearly cost:          {_money(stats.total_yearly_cost())}")

    peak = stats.peak_spending_month()
    if peak:
        print(f"Peak month:           {month_name(peak.month)} ({_money(peak.amount)})")

    by_category = stats.costs_by_category()
    if by_category:
        print()
        print("By category (monthly):")
        for row in by_category:
            print(f"  {row.display_name:<20} {_money(row.cost):>12}  {row.share:6.1%}")


def cmd_upcoming(args, app: AppComponents):
    """Handle the 'upcoming' subcommand."""
    today = app.statistics.today()
    payments = app.statistics.upcoming_payments(days=args.days)
    if not payments:
        print("No upcoming payments")
        return
    for subscription in payments:
        days = calculator.days_until(subscription, today)
        when = "today" if days == 0 else f"in {days} day{'s' if days != 1 else ''}"
        print(
            f"{subscription.next_payment_date.isoformat()}  "
            f"{subscription.name:<30} {_money(subscription.cost):>12}  {when}"
        )


def cmd_export(args, app: AppComponents):
    """Handle the 'export' subcommand."""
    try:
        count = app.csv_codec.export_csv(Path(args.path))
    except CSVCodecError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Exported {count} subscription(s) to {args.path}")


def cmd_import(args, app: AppComponents):
    """Handle the 'import' subcommand."""
    try:
        report = app.csv_codec.import_csv(Path(args.path))
    except (CSVCodecError, StorageError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Imported {report.imported_count} subscription(s)")
    for name in report.created_categories:
        print(f"  + category {name}")
    for name in report.created_tags:
        print(f"  + tag {name}")
    for row in report.skipped:
        print(f"  skipped line {row.line_number}: {row.reason}", file=sys.stderr)


def cmd_reminders(args, app: AppComponents):
    """Handle the 'reminders' subcommand."""
    delivery = app.reminder_delivery
    reminders = (
        delivery.pending()
        if isinstance(delivery, InMemoryReminderCenter)
        else app.refresh_reminders()
    )
    if not reminders:
        print("No reminders scheduled")
        return
    for reminder in reminders:
        print(f"{reminder.fire_at:%Y-%m-%d %H:%M}  {reminder.title}: {reminder.body}")


def cmd_categories(args, app: AppComponents):
    """Handle the 'categories' subcommand."""
    for category in sorted(app.store.list_categories(), key=lambda c: c.name.casefold()):
        print(f"{category.color:<10} {category.name}")


def cmd_tags(args, app: AppComponents):
    """Handle the 'tags' subcommand."""
    for tag in sorted(app.store.list_tags(), key=lambda t: t.name.casefold()):
        print(f"{tag.color:<10} {tag.name}")


COMMANDS = {
    'list': cmd_list,
    'stats': cmd_stats,
    'upcoming': cmd_upcoming,
    'export': cmd_export,
    'import': cmd_import,
    'reminders': cmd_reminders,
    'categories': cmd_categories,
    'tags': cmd_tags,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='subtracker',
        description='Track recurring subscriptions and what they cost you.',
    )
    parser.add_argument(
        '--data-dir',
        help='Directory holding the data files (default: from settings)'
    )

    subparsers = parser.add_subparsers(dest='command', title='commands', metavar='<command>')

    list_parser = subparsers.add_parser('list', help='List subscriptions by next payment date')
    list_parser.add_argument(
        '--search', '-s',
        help='Only show subscriptions whose name contains this text'
    )

    subparsers.add_parser('stats', help='Show spending statistics')

    upcoming_parser = subparsers.add_parser('upcoming', help='Show payments due soon')
    upcoming_parser.add_argument(
        '--days', '-d',
        type=int,
        default=None,
        help='Look-ahead window in days (default: from settings)'
    )

    export_parser = subparsers.add_parser('export', help='Export subscriptions to CSV')
    export_parser.add_argument('path', help='CSV file to write')

    import_parser = subparsers.add_parser('import', help='Import subscriptions from CSV')
    import_parser.add_argument('path', help='CSV file to read')

    subparsers.add_parser('reminders', help='Show the reminders that would fire')
    subparsers.add_parser('categories', help='List categories')
    subparsers.add_parser('tags', help='List tags')

    return parser


def main(argv=None):
    """Main entry point for the subtracker CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        app = _build(args)
    except StorageError as e:
        print(f"Error: could not open data directory: {e}", file=sys.stderr)
        sys.exit(1)

    COMMANDS[args.command](args, app)


if __name__ == '__main__':
    main()
