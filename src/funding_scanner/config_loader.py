from pathlib import Path
from typing import Any

import yaml


def get_config_path(config_type: str, filename: str, custom_config_dir: str | None = None) -> Path:
    if custom_config_dir:
        base_dir = Path(custom_config_dir)
    else:
        base_dir = Path(__file__).parent / 'configs'

    return base_dir / config_type / filename


def _load_yaml(config_path: Path, description: str) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(
            f"{description} file not found at '{config_path}'. "
            f"Please ensure the config file exists or provide a valid path."
        )

    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_funder_patterns(patterns_file: str | None = None, custom_config_dir: str | None = None) -> list[dict[str, Any]]:
    if patterns_file:
        config_path = Path(patterns_file)
    else:
        config_path = get_config_path('patterns', 'funders.yaml', custom_config_dir)

    data = _load_yaml(config_path, "Funder patterns")
    return data.get('funders', [])


def load_section_patterns(sections_file: str | None = None, custom_config_dir: str | None = None) -> dict[str, Any]:
    if sections_file:
        config_path = Path(sections_file)
    else:
        config_path = get_config_path('sections', 'default.yaml', custom_config_dir)

    data = _load_yaml(config_path, "Section patterns")
    return {
        'headings': data.get('headings', []),
        'terminators': data.get('terminators', []),
    }
