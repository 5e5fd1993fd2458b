# schedule_finder/outputs/csv_output.py

import os
import csv
from schedule_finder.outputs.base import BaseOutput


def describe_rule(config):
    """Short human readable form of a recurring config, e.g. ``monthly 1TU/3TU``."""
    text = config.frequency
    if config.interval != 1:
        text += f"/{config.interval}"
    if config.patterns:
        text += " " + "/".join(
            f"{p.value}{p.type}" for p in config.patterns
        )
    return text


class CSVOutput(BaseOutput):
    """
    Writes the inferred schedules to schedules.csv in the output directory,
    one row per payee sorted by payee.
    """
    def __init__(self, config):
        self.config     = config
        self.output_dir = config.get('output_dir', 'data')
        os.makedirs(self.output_dir, exist_ok=True)

    def write(self, schedules):
        out_path = os.path.join(self.output_dir, 'schedules.csv')
        rows = sorted(schedules, key=lambda s: (s.payee or '', s.account))

        with open(out_path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow([
                'payee', 'account', 'amount', 'amount_op',
                'rule', 'start', 'date_op',
            ])
            for s in rows:
                writer.writerow([
                    s.payee or '',
                    s.account,
                    s.amount,
                    s.condition_op('amount'),
                    describe_rule(s.date),
                    s.date.start.isoformat(),
                    s.condition_op('date'),
                ])

        return out_path
