# schedule_finder/cli.py
import logging
import os
from datetime import date

import anyio
import click
from dotenv import load_dotenv

from schedule_finder.config import load_config
from schedule_finder.database import add_accounts, add_payee, append_transactions
from schedule_finder.ledger import Ledger
from schedule_finder.manual import load_ledger
from schedule_finder.outputs import get_output
from schedule_finder.outputs.csv_output import describe_rule
from schedule_finder.patterns import SearchOptions
from schedule_finder.schedules import find_schedules


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to config.yaml'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file, e.g. setting SCHEDFIND_LOG'
)
@click.pass_context
def main(ctx, config_path, env_file):
    """
    Infer recurring payment schedules (weekly, every two weeks, monthly
    variants) from the transaction history stored in a SQLite ledger.
    """
    if env_file:
        load_dotenv(env_file)

    try:
        cfg = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    level = os.getenv('SCHEDFIND_LOG', str(cfg['log_level'])).upper()
    logging.basicConfig(level=level)
    ctx.obj = cfg


@main.command('import')
@click.argument('ledger_file', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--db', 'db_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='SQLite ledger to store into (defaults to db_path from config)'
)
@click.pass_obj
def import_ledger(cfg, ledger_file, db_path):
    """Store accounts, payees and transactions from a YAML ledger file."""
    db_path = db_path or cfg['db_path']
    try:
        accounts, payees, txs = load_ledger(ledger_file)
    except ValueError as e:
        raise click.ClickException(f"Error loading ledger: {e}")

    add_accounts(accounts, db_path)
    for payee in payees:
        add_payee(db_path, payee['id'], payee['name'], payee['transfer_acct'])
    append_transactions(txs, db_path)
    click.echo(f"Stored {len(txs)} transaction(s) in {db_path}.")


@main.command('find')
@click.option(
    '--db', 'db_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='SQLite ledger to read (defaults to db_path from config)'
)
@click.option(
    '--output', 'output_format',
    default='text',
    type=click.Choice(['text', 'csv', 'yaml']),
    help='Print schedules, or write them with the csv/yaml output module'
)
@click.option(
    '--today', 'today',
    default=None,
    help='Date (YYYY-MM-DD) used as today for weekday based patterns'
)
@click.pass_obj
def find(cfg, db_path, output_format, today):
    """Search the ledger for recurring schedules, one per payee."""
    db_path = db_path or cfg['db_path']
    if not os.path.exists(db_path):
        raise click.ClickException(f"Database not found: {db_path}")
    try:
        today = date.fromisoformat(today) if today else None
    except ValueError:
        raise click.BadParameter(f"Invalid date: {today}", param_hint='--today')

    options = SearchOptions(today=today, weekday_source=cfg['weekday_source'])
    schedules = anyio.run(find_schedules, Ledger(db_path), options)

    if output_format == 'text':
        for s in schedules:
            click.echo(
                f"{s.payee}\t{s.account}\t{s.amount} ({s.condition_op('amount')})"
                f"\t{describe_rule(s.date)} from {s.date.start.isoformat()}"
                f" ({s.condition_op('date')})"
            )
    else:
        path = get_output(output_format, cfg).write(schedules)
        click.echo(f"Wrote {len(schedules)} schedule(s) to {path}.")

    click.echo(f"Found {len(schedules)} schedule(s).")
