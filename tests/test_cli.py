import csv

import yaml
from click.testing import CliRunner

from schedule_finder.cli import main as cli


def write_ledger(path):
    path.write_text(
        """\
accounts:
  - id: checking
    name: Checking
  - id: savings
    name: Savings
payees:
  - id: P1
    name: Landlord
  - id: xfer
    name: "Transfer: Savings"
    transfer_acct: savings
transactions:
  - {id: t1, account: checking, payee: P1, amount: -500, date: 2023-12-18}
  - {id: t2, account: checking, payee: P1, amount: -500, date: 2024-01-01}
  - {id: t3, account: checking, payee: P1, amount: -500, date: 2024-01-15}
  - {id: t4, account: checking, payee: P1, amount: -500, date: 2024-01-29}
  - {id: t5, account: checking, payee: xfer, amount: -100, date: 2024-01-01}
  - {id: t6, account: checking, payee: xfer, amount: -100, date: 2024-01-15}
  - {id: t7, account: checking, payee: xfer, amount: -100, date: 2024-01-29}
"""
    )


def write_config(tmp_path, data_dir):
    cfg = {
        'db_path': str(tmp_path / 'configured.db'),
        'output_dir': str(data_dir),
        'log_level': 'WARNING',
    }
    path = tmp_path / 'config.yaml'
    with open(path, 'w') as f:
        yaml.safe_dump(cfg, f)
    return path


def _import(runner, cfg_path, ledger, db_path):
    res = runner.invoke(
        cli,
        ['--config', str(cfg_path), 'import', str(ledger), '--db', str(db_path)],
    )
    assert res.exit_code == 0, res.output
    return res


def test_cli_import_and_find_text(tmp_path):
    ledger = tmp_path / 'ledger.yaml'
    write_ledger(ledger)
    cfg_path = write_config(tmp_path, tmp_path / 'data')
    db_path = tmp_path / 'ledger.db'

    runner = CliRunner()
    res = _import(runner, cfg_path, ledger, db_path)
    assert 'Stored 7 transaction(s)' in res.output

    res = runner.invoke(
        cli,
        ['--config', str(cfg_path), 'find', '--db', str(db_path), '--today', '2024-02-07'],
    )
    assert res.exit_code == 0, res.output
    assert 'weekly/2 from 2023-12-18 (is)' in res.output
    assert '-500 (is)' in res.output
    # transfers never become schedules
    assert 'xfer' not in res.output
    assert 'Found 1 schedule(s).' in res.output


def test_cli_find_csv_and_yaml_outputs(tmp_path):
    ledger = tmp_path / 'ledger.yaml'
    write_ledger(ledger)
    data_dir = tmp_path / 'data'
    cfg_path = write_config(tmp_path, data_dir)

    runner = CliRunner()
    _import(runner, cfg_path, ledger, tmp_path / 'configured.db')

    # --db falls back to db_path from the config
    res = runner.invoke(
        cli, ['--config', str(cfg_path), 'find', '--output', 'csv', '--today', '2024-02-07']
    )
    assert res.exit_code == 0, res.output
    with open(data_dir / 'schedules.csv', newline='') as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 1
    assert rows[0]['payee'] == 'P1'
    assert rows[0]['rule'] == 'weekly/2'
    assert rows[0]['start'] == '2023-12-18'
    assert rows[0]['date_op'] == 'is'

    res = runner.invoke(
        cli, ['--config', str(cfg_path), 'find', '--output', 'yaml', '--today', '2024-02-07']
    )
    assert res.exit_code == 0, res.output
    with open(data_dir / 'schedules.yaml') as f:
        [schedule] = yaml.safe_load(f)
    assert schedule['date'] == {
        'frequency': 'weekly',
        'interval': 2,
        'start': '2023-12-18',
    }
    assert [c['op'] for c in schedule['conditions']] == ['is', 'is', 'is', 'is']


def test_cli_rejects_bad_input(tmp_path):
    runner = CliRunner()
    cfg_path = write_config(tmp_path, tmp_path / 'data')

    res = runner.invoke(
        cli, ['--config', str(cfg_path), 'find', '--db', str(tmp_path / 'missing.db')]
    )
    assert res.exit_code != 0
    assert 'Database not found' in res.output

    bad = tmp_path / 'bad.yaml'
    bad.write_text(
        "transactions:\n  - {id: t1, account: checking, amount: 12.5, date: 2024-01-01}\n"
    )
    res = runner.invoke(
        cli, ['--config', str(cfg_path), 'import', str(bad), '--db', str(tmp_path / 'x.db')]
    )
    assert res.exit_code != 0
    assert 'must be an integer' in res.output
