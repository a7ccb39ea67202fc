import json

import pytest
import requests

import config
import dataset
from dataset import load_dataset, parse_records
from errors import DatasetUnavailableError
from models import GoodRecord

def test_parse_full_and_aliases():
    goods = parse_records([
        {"name": "Oil", "demandElasticity": -0.4, "supplyElasticity": 0.15},
        {"good": "Coffee", "demandElasticity": -0.3, "supplyElasticity": 0.6},
        {"name": "Bread", "elasticity": -0.25},
    ])
    assert goods == [
        GoodRecord("Oil", -0.4, 0.15),
        GoodRecord("Coffee", -0.3, 0.6),
        GoodRecord("Bread", -0.25, None),
    ]

@pytest.mark.parametrize("raw", [
    {"name": "Oil"},
    [{"demandElasticity": -0.4}],
    [{"name": "  ", "demandElasticity": -0.4}],
    [{"name": "Oil", "demandElasticity": "-0.4"}],
    [{"name": "Oil", "demandElasticity": -0.4, "supplyElasticity": True}],
    [{"name": "Oil", "supplyElasticity": 0.1}],
    [{"name": "Oil", "elasticity": -0.4}, {"name": "Oil", "elasticity": -0.5}],
    ["Oil"],
])
def test_parse_rejects_malformed(raw):
    with pytest.raises(DatasetUnavailableError):
        parse_records(raw)

def test_empty_list_is_returned_as_is():
    assert parse_records([]) == []

def test_load_from_file(tmp_path):
    p = tmp_path / "goods.json"
    p.write_text(json.dumps([{"name": "Oil", "demandElasticity": -0.4, "supplyElasticity": 0.15}]))
    assert load_dataset(str(p)) == [GoodRecord("Oil", -0.4, 0.15)]

def test_load_bad_json(tmp_path):
    p = tmp_path / "goods.json"
    p.write_text("[{not json")
    with pytest.raises(DatasetUnavailableError):
        load_dataset(str(p))

def test_bundled_dataset_loads():
    goods = load_dataset(config.DATASET_SOURCE)
    assert goods
    assert all(g.supply_elasticity is not None for g in goods)
    assert len({g.name for g in goods}) == len(goods)

class _Resp:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

def test_load_from_url(monkeypatch):
    calls = []
    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _Resp(200, [{"name": "Oil", "demandElasticity": -0.4, "supplyElasticity": 0.15}])
    monkeypatch.setattr(dataset.requests, "get", fake_get)
    goods = load_dataset("https://example.test/dataset.json", timeout=3)
    assert goods[0].name == "Oil"
    assert calls == [("https://example.test/dataset.json", 3)]

def test_url_http_error(monkeypatch):
    monkeypatch.setattr(dataset.requests, "get", lambda url, timeout: _Resp(404, text="missing"))
    with pytest.raises(DatasetUnavailableError, match="404"):
        load_dataset("https://example.test/dataset.json")

def test_url_network_error(monkeypatch):
    def boom(url, timeout):
        raise requests.ConnectionError("refused")
    monkeypatch.setattr(dataset.requests, "get", boom)
    with pytest.raises(DatasetUnavailableError):
        load_dataset("http://example.test/dataset.json")
