# -*- coding: utf-8 -*-
"""
Unit tests for batch resolution over DataFrames and payload files.
"""

import json
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.variants.batch import (
    NumpyEncoder,
    read_payloads,
    resolve_and_summarize,
    resolve_frame,
    summarize,
    write_payloads,
)
from src.variants.loader import DISCRIMINATOR_ENV_VAR, load_union_spec
from src.variants.models import AllowList, Schema, StaticLabel, UnionSpec


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def union_spec(monkeypatch):
    monkeypatch.delenv(DISCRIMINATOR_ENV_VAR, raising=False)
    return load_union_spec(FIXTURES_DIR / "test_union_spec.yaml")


@pytest.fixture
def payloads_df():
    return read_payloads(FIXTURES_DIR / "test_payloads.jsonl")


class TestResolveFrame:
    """Tests for row-wise resolution."""

    def test_resolves_each_row(self, union_spec, payloads_df):
        out = resolve_frame(payloads_df, union_spec)
        assert out["variant"].tolist() == [
            "Band",
            "Performer",
            "Performer",
            "OrchestraData",
            "VenueData",
            "Performer",
        ]

    def test_input_not_modified(self, union_spec, payloads_df):
        columns = list(payloads_df.columns)
        resolve_frame(payloads_df, union_spec, column="kind_resolved")
        assert list(payloads_df.columns) == columns

    def test_custom_column(self, union_spec, payloads_df):
        out = resolve_frame(payloads_df, union_spec, column="resolved")
        assert "resolved" in out.columns
        assert "variant" not in out.columns

    def test_nan_discriminator_is_missing(self, union_spec):
        df = pd.DataFrame({"objectType": ["Band", np.nan, None], "name": ["a", "b", "c"]})
        out = resolve_frame(df, union_spec)
        assert out["variant"].tolist() == ["Band", "Performer", "Performer"]

    def test_empty_frame(self, union_spec):
        out = resolve_frame(pd.DataFrame({"objectType": []}), union_spec)
        assert out["variant"].tolist() == []


class TestSummarize:
    """Tests for batch summaries."""

    def test_counts(self, union_spec, payloads_df):
        summary = summarize(payloads_df, union_spec)

        assert summary.total == 6
        assert summary.variant_counts == {
            "Performer": 3,
            "Band": 1,
            "OrchestraData": 1,
            "VenueData": 1,
        }
        assert summary.outcome_counts == {
            "allow_list": 2,
            "missing_discriminator": 1,
            "naming_convention": 1,
            "static_label": 1,
            "no_match": 1,
        }
        assert summary.fallback_count == 2
        assert summary.pct_fallback() == pytest.approx(100 * 2 / 6)

    def test_unused_variants_are_listed(self, union_spec):
        summary = summarize(pd.DataFrame([{"objectType": "Band"}]), union_spec)
        assert summary.variant_counts["VenueData"] == 0
        assert summary.to_dict()["fallback_count"] == 0

    def test_empty_summary(self, union_spec):
        summary = summarize(pd.DataFrame(), union_spec)
        assert summary.total == 0
        assert summary.pct_fallback() == 0.0


class TestPayloadFiles:
    """Tests for reading and writing payload files."""

    def test_read_jsonl(self, payloads_df):
        assert len(payloads_df) == 6
        assert "objectType" in payloads_df.columns

    def test_read_json_array(self, tmp_path):
        path = tmp_path / "payloads.json"
        path.write_text(json.dumps([{"objectType": "Band"}, {"objectType": "Performer"}]))
        assert len(read_payloads(path)) == 2

    def test_read_json_object_rejected(self, tmp_path):
        path = tmp_path / "payloads.json"
        path.write_text(json.dumps({"objectType": "Band"}))
        with pytest.raises(ValueError, match="JSON array"):
            read_payloads(path)

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_payloads(tmp_path / "missing.jsonl")

    def test_write_omits_missing_cells(self, union_spec, payloads_df, tmp_path):
        out_path = tmp_path / "out" / "resolved.jsonl"
        write_payloads(resolve_frame(payloads_df, union_spec), out_path)

        rows = [json.loads(line) for line in out_path.read_text().splitlines()]
        assert len(rows) == 6
        assert rows[0]["members"] == ["A", "B"]
        assert rows[2] == {"name": "Nobody", "variant": "Performer"}

    def test_numpy_encoder(self):
        data = {"count": np.int64(3), "ratio": np.float64(0.5), "flag": np.bool_(True)}
        assert json.loads(json.dumps(data, cls=NumpyEncoder)) == {
            "count": 3,
            "ratio": 0.5,
            "flag": True,
        }


class TestPayloadFidelity:
    """Payload values pass through read -> resolve -> write unchanged."""

    def _round_trip(self, union_spec, tmp_path, lines):
        in_path = tmp_path / "in.jsonl"
        in_path.write_text("\n".join(json.dumps(line) for line in lines) + "\n")
        out_path = tmp_path / "out.jsonl"
        write_payloads(resolve_frame(read_payloads(in_path), union_spec), out_path)
        return [json.loads(line) for line in out_path.read_text().splitlines()]

    def test_int_stays_int_when_other_rows_lack_field(self, union_spec, tmp_path):
        rows = self._round_trip(union_spec, tmp_path, [
            {"objectType": "Band", "count": 3},
            {"objectType": "Performer"},
        ])
        assert rows[0]["count"] == 3
        assert isinstance(rows[0]["count"], int)
        assert "count" not in rows[1]

    def test_int_discriminator_stays_int(self, tmp_path):
        union = UnionSpec(schemas=(
            Schema(name="V1", discriminators=(AllowList("objectType", (1,)),)),
            Schema(name="V2", discriminators=(AllowList("objectType", (2,)),)),
        ))
        rows = self._round_trip(union, tmp_path, [{"objectType": 2}, {"name": "x"}])
        assert rows[0] == {"objectType": 2, "variant": "V2"}
        assert isinstance(rows[0]["objectType"], int)
        assert rows[1] == {"name": "x", "variant": "V1"}

    def test_bool_stays_bool(self, union_spec, tmp_path):
        rows = self._round_trip(union_spec, tmp_path, [
            {"objectType": "Band", "active": True},
            {"objectType": "Band"},
        ])
        assert rows[0]["active"] is True

    def test_explicit_null_is_kept(self, union_spec, tmp_path):
        rows = self._round_trip(union_spec, tmp_path, [
            {"objectType": "Band", "note": None},
            {"objectType": "Band"},
        ])
        assert rows[0] == {"objectType": "Band", "note": None, "variant": "Band"}
        assert rows[1] == {"objectType": "Band", "variant": "Band"}

    def test_null_discriminator_falls_back(self, union_spec, tmp_path):
        rows = self._round_trip(union_spec, tmp_path, [{"objectType": None, "name": "x"}])
        assert rows[0] == {"objectType": None, "name": "x", "variant": "Performer"}


class TestSinglePass:
    """Resolving and summarizing a frame evaluates each row once."""

    def test_label_function_called_once_per_row(self):
        calls = []

        def label():
            calls.append(1)
            return "Group"

        union = UnionSpec(schemas=(
            Schema(name="Performer", discriminators=(AllowList("objectType", ("Performer",)),)),
            Schema(name="Band", discriminators=(StaticLabel(label_fn=label),)),
        ))
        df = pd.DataFrame([{"objectType": "Group"}, {"objectType": "Choir"}, {"objectType": "Group"}])

        out, summary = resolve_and_summarize(df, union)

        assert len(calls) == 3
        assert out["variant"].tolist() == ["Band", "Performer", "Band"]
        assert summary.variant_counts == {"Performer": 1, "Band": 2}
        assert summary.outcome_counts == {"static_label": 2, "no_match": 1}
