from __future__ import annotations
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from config import HTTP_TIMEOUT
from errors import DatasetUnavailableError
from models import GoodRecord

logger = logging.getLogger(__name__)

def load_dataset(source: str, timeout: Optional[float] = None) -> List[GoodRecord]:
    """
    Read the reference dataset from a JSON file or an http(s) URL.
    Records look like {"name", "demandElasticity", "supplyElasticity"} or,
    for demand-only datasets, {"name", "elasticity"}; "good" is accepted for "name".
    An empty list is returned as-is; deciding what that means is up to the caller.
    """
    if source.startswith(("http://", "https://")):
        raw = _fetch(source, timeout or HTTP_TIMEOUT)
    else:
        raw = _read_file(Path(source))
    goods = parse_records(raw)
    logger.info("Loaded %d goods from %s", len(goods), source)
    return goods

def _fetch(url: str, timeout: float) -> Any:
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise DatasetUnavailableError(f"Could not fetch dataset from {url}: {e}") from e
    if resp.status_code != 200:
        raise DatasetUnavailableError(f"Dataset fetch failed {resp.status_code}: {resp.text[:200]}")
    try:
        return resp.json()
    except ValueError as e:
        raise DatasetUnavailableError(f"Dataset at {url} is not valid JSON: {e}") from e

def _read_file(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise DatasetUnavailableError(f"Dataset file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DatasetUnavailableError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise DatasetUnavailableError(f"Failed to read dataset {path}: {e}") from e

def parse_records(raw: Any) -> List[GoodRecord]:
    if not isinstance(raw, list):
        raise DatasetUnavailableError("Dataset must be a JSON array of goods")
    goods: List[GoodRecord] = []
    seen = set()
    for i, item in enumerate(raw):
        good = _parse_record(i, item)
        if good.name in seen:
            raise DatasetUnavailableError(f"Duplicate good name {good.name!r} at index {i}")
        seen.add(good.name)
        goods.append(good)
    return goods

def _parse_record(i: int, item: Any) -> GoodRecord:
    if not isinstance(item, dict):
        raise DatasetUnavailableError(f"Record {i} must be an object")
    name = item.get("name", item.get("good"))
    if not isinstance(name, str) or not name.strip():
        raise DatasetUnavailableError(f"Record {i} is missing a non-empty 'name'")

    demand = _number(item, i, "demandElasticity", "elasticity")
    if demand is None:
        raise DatasetUnavailableError(f"Record {i} ({name}) has no demand elasticity")
    supply = _number(item, i, "supplyElasticity")
    return GoodRecord(name=name.strip(), demand_elasticity=demand, supply_elasticity=supply)

def _number(item: Dict[str, Any], i: int, *keys: str) -> Optional[float]:
    for key in keys:
        if key not in item or item[key] is None:
            continue
        value = item[key]
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise DatasetUnavailableError(f"Record {i} field '{key}' must be a finite number")
        return float(value)
    return None
