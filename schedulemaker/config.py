"""
Configuration files.

A config file is a JSON document describing one schedule run:

    {
      "name": "fall",
      "startDate": "2024-08-26",
      "endDate": "2024-12-13",
      "courses": ["CSCI-243", "MATH-251"],
      "format": "basic",
      "output": "schedules.txt",
      "rules": {"noClassOn": ["Friday"], "noClassBefore": "09:00",
                "noClassAfter": "18:00", "allowOnline": false, "layover": 10},
      "buffers": [{"name": "Lunch", "days": ["Monday"],
                   "startTime": "12:00", "endTime": "13:00"}]
    }

Unknown keys are ignored; absent rules/buffers mean "no constraint".
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Optional

from schedulemaker.model import Buffer, Day, Rules, parse_time

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


class ConfigError(ValueError):
    """Raised when a config file or config value cannot be used."""


@dataclass
class Config:
    courses: list[str]
    start_date: date
    end_date: date
    name: Optional[str] = None
    format: Optional[str] = None
    output: Optional[str] = None
    rules: Optional[Rules] = None
    buffers: list[Buffer] = field(default_factory=list)


def normalize_course(code: str) -> str:
    # "csci 243" -> "CSCI-243"
    return "-".join(str(code).upper().split())


def parse_date(text: str) -> date:
    raw = str(text).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {text!r} (use YYYY-MM-DD or MM/DD/YYYY)")


def _check_dates(start: date, end: date) -> None:
    if start >= end:
        logger.warning("Start date (%s) occurs after end date (%s); this may cause issues!", start, end)


def _parse_rules(raw: Any) -> Optional[Rules]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError("'rules' must be an object")

    try:
        days = raw.get("noClassOn")
        before = raw.get("noClassBefore")
        after = raw.get("noClassAfter")
        layover = raw.get("layover")
        allow_online = raw.get("allowOnline")
        rules = Rules(
            no_class_on=[Day.parse(d) for d in days] if days is not None else None,
            no_class_before=parse_time(before) if before is not None else None,
            no_class_after=parse_time(after) if after is not None else None,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid rules: {exc}") from exc

    if allow_online is not None:
        if not isinstance(allow_online, bool):
            raise ConfigError(f"Invalid rules: 'allowOnline' must be true or false, got {allow_online!r}")
        rules.allow_online = allow_online

    if layover is not None:
        # bool is an int subclass; reject it along with floats and strings
        if isinstance(layover, bool) or not isinstance(layover, int) or layover < 0:
            raise ConfigError(f"Invalid rules: 'layover' must be a whole number of minutes >= 0, got {layover!r}")
        rules.layover = layover
    return rules


def _parse_buffers(raw: Any) -> list[Buffer]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError("'buffers' must be a list")

    out: list[Buffer] = []
    for i, b in enumerate(raw):
        try:
            out.append(
                Buffer(
                    name=str(b.get("name") or "buffer"),
                    days=[Day.parse(d) for d in b["days"]],
                    start_time=parse_time(b["startTime"]),
                    end_time=parse_time(b["endTime"]),
                )
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid buffer #{i + 1}: {exc}") from exc
        if out[-1].start_time > out[-1].end_time:
            raise ConfigError(f"Buffer '{out[-1].name}' ends before it starts")
    return out


def config_from_dict(data: Any) -> Config:
    if not isinstance(data, dict):
        raise ConfigError("Config must be a JSON object")

    courses = data.get("courses")
    if not isinstance(courses, list) or not courses:
        raise ConfigError("Config must have courses")

    try:
        start = parse_date(data["startDate"])
        end = parse_date(data["endDate"])
    except KeyError as exc:
        raise ConfigError(f"Config is missing {exc.args[0]!r}") from exc
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    _check_dates(start, end)

    return Config(
        name=data.get("name"),
        courses=[normalize_course(c) for c in courses],
        start_date=start,
        end_date=end,
        format=data.get("format"),
        output=data.get("output"),
        rules=_parse_rules(data.get("rules")),
        buffers=_parse_buffers(data.get("buffers")),
    )


def load_config(path: str | Path) -> Config:
    """
    Load a config file. Raises ConfigError if it is missing, not JSON or invalid.
    """
    config_path = Path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Parsing failed for '{config_path}': {exc}") from exc

    config = config_from_dict(data)
    logger.debug("Config file '%s' loaded successfully", config_path)
    return config


def config_from_args(
    courses: Iterable[str],
    start_date: str,
    end_date: str,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    format: Optional[str] = None,
    output: Optional[str] = None,
) -> Config:
    """
    Build a config from command line values.

    The optional start/end times become noClassBefore/noClassAfter rules;
    a time that can't be parsed is reported and its rule left out.
    """
    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except ValueError as exc:
        raise ConfigError(f"Unable to parse dates: {exc}") from exc
    _check_dates(start, end)

    config = Config(
        name="cli",
        courses=[normalize_course(c) for c in courses],
        start_date=start,
        end_date=end,
        format=format,
        output=output,
    )
    if not config.courses:
        raise ConfigError("No courses given")

    if not start_time and not end_time:
        return config

    rules = Rules()
    if start_time:
        try:
            rules.no_class_before = parse_time(start_time)
        except ValueError as exc:
            logger.error("Unable to parse start time; excluding rule (%s)", exc)
    if end_time:
        try:
            rules.no_class_after = parse_time(end_time)
        except ValueError as exc:
            logger.error("Unable to parse end time; excluding rule (%s)", exc)
    config.rules = rules
    return config


def config_to_dict(config: Config) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": config.name,
        "startDate": config.start_date.isoformat(),
        "endDate": config.end_date.isoformat(),
        "courses": list(config.courses),
        "format": config.format,
        "output": config.output,
    }

    if config.rules is not None:
        r = config.rules
        rules: dict[str, Any] = {}
        if r.no_class_on is not None:
            rules["noClassOn"] = [d.label for d in r.no_class_on]
        if r.no_class_before is not None:
            rules["noClassBefore"] = r.no_class_before.strftime("%H:%M")
        if r.no_class_after is not None:
            rules["noClassAfter"] = r.no_class_after.strftime("%H:%M")
        if r.allow_online is not None:
            rules["allowOnline"] = r.allow_online
        if r.layover is not None:
            rules["layover"] = r.layover
        data["rules"] = rules

    if config.buffers:
        data["buffers"] = [
            {
                "name": b.name,
                "days": [d.label for d in b.days],
                "startTime": b.start_time.strftime("%H:%M"),
                "endTime": b.end_time.strftime("%H:%M"),
            }
            for b in config.buffers
        ]

    return data


def save_config(config: Config, path: str | Path) -> Path:
    """
    Write the config as JSON. Creates parent directories if needed.
    """
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config_to_dict(config), indent=2, ensure_ascii=False), encoding="utf-8")
    return config_path
