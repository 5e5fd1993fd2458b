# schedule_finder/outputs/yaml_output.py

import os
import yaml
from schedule_finder.outputs.base import BaseOutput


class YAMLOutput(BaseOutput):
    """Dumps the full schedule records, conditions included, to schedules.yaml."""

    def __init__(self, config):
        self.config     = config
        self.output_dir = config.get('output_dir', 'data')
        os.makedirs(self.output_dir, exist_ok=True)

    def write(self, schedules):
        out_path = os.path.join(self.output_dir, 'schedules.yaml')
        with open(out_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(
                [s.to_dict() for s in schedules], f, sort_keys=False
            )
        return out_path
