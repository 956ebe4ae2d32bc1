from pathlib import Path
import json

from slide_model import DEFAULT_STYLES, StyleOptions, styles_from_dict, styles_to_dict

CONFIG_FILE = Path.home() / ".hymn_slides_config.json"


def _load_config():
    if not CONFIG_FILE.exists():
        return {}
    with open(CONFIG_FILE, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{CONFIG_FILE} does not contain a JSON object.")
    return data


def _save_config(data):
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _update_config(**values):
    data = _load_config()
    data.update(values)
    _save_config(data)


def load_style_options() -> StyleOptions:
    """Saved styles overlaid on the defaults (a partial entry is fine)."""
    raw = _load_config().get("styles")
    if raw is None:
        return DEFAULT_STYLES
    return styles_from_dict(raw)


def save_style_options(styles: StyleOptions) -> None:
    _update_config(styles=styles_to_dict(styles))


def load_backgrounds_dir():
    return _load_config().get("backgrounds_dir")


def save_backgrounds_dir(path):
    _update_config(backgrounds_dir=str(path))


def load_export_prefs():
    cfg = _load_config()
    return {
        "last_output": cfg.get("last_output"),
    }


def save_export_prefs(output_path):
    _update_config(last_output=str(output_path))
