import json

import numpy as np
import pytest
import yaml

from approx_kfn import DrusillaSelect, NotTrainedError, SerializationError
from approx_kfn.serialization import (
    STATE_FIELDS,
    decode_state,
    encode_state,
    infer_encoding,
)


def test_saved_models_give_identical_results(rng, tmp_path):
    dataset = rng.random((100, 3))
    model = DrusillaSelect(l=3, m=3, reference_set=dataset)

    # Targets start out in unrelated states and are overwritten by loading
    model_json = DrusillaSelect(l=10, m=10, reference_set=rng.random((120, 2)))
    model_yaml = DrusillaSelect(l=2, m=2)
    model_binary = DrusillaSelect(l=5, m=6)
    model_binary.train(rng.random((40, 10)))

    for target, suffix in [(model_json, ".json"), (model_yaml, ".yaml"), (model_binary, ".npz")]:
        path = tmp_path / f"drusilla{suffix}"
        model.save(path)
        target.load_from(path)

    neighbors, distances = model.search(dataset, k=3)
    for restored in (model_json, model_yaml, model_binary):
        assert (restored.l, restored.m) == (3, 3)
        restored_neighbors, restored_distances = restored.search(dataset, k=3)
        assert restored_neighbors.shape == neighbors.shape
        np.testing.assert_array_equal(restored_neighbors, neighbors)
        np.testing.assert_array_equal(restored_distances, distances)


@pytest.mark.parametrize("encoding", ["binary", "json", "yaml"])
def test_round_trip_is_bit_identical(rng, encoding):
    model = DrusillaSelect(l=4, m=5, reference_set=rng.normal(size=(50, 7)) * 1e-3)

    restored = DrusillaSelect.loads(model.dumps(encoding), encoding)

    np.testing.assert_array_equal(restored.candidate_set, model.candidate_set)
    np.testing.assert_array_equal(restored.candidate_indices, model.candidate_indices)
    assert restored.candidate_set.dtype == np.float64
    assert restored.candidate_indices.dtype == np.int64


@pytest.mark.parametrize("encoding", ["binary", "json", "yaml"])
def test_untrained_state_round_trip(encoding):
    model = DrusillaSelect(l=2, m=3)

    restored = DrusillaSelect.loads(model.dumps(encoding), encoding)

    assert (restored.l, restored.m) == (2, 3)
    assert not restored.is_trained
    with pytest.raises(NotTrainedError):
        restored.search(np.zeros((1, 2)), k=1)


def test_load_classmethod(rng, tmp_path):
    dataset = rng.random((30, 4))
    model = DrusillaSelect(l=2, m=3, reference_set=dataset)
    path = tmp_path / "models" / "drusilla.state"

    model.save(path, encoding="yaml")
    restored = DrusillaSelect.load(path, encoding="yaml")

    np.testing.assert_array_equal(restored.search(dataset, 2)[0], model.search(dataset, 2)[0])


def test_state_fields_are_written_in_order(rng):
    model = DrusillaSelect(l=1, m=2, reference_set=rng.random((5, 2)))

    assert tuple(model.state_dict()) == STATE_FIELDS
    assert tuple(json.loads(model.dumps("json"))) == STATE_FIELDS
    assert tuple(yaml.safe_load(model.dumps("yaml"))) == STATE_FIELDS


def test_infer_encoding():
    assert infer_encoding("model.npz") == "binary"
    assert infer_encoding("model.json") == "json"
    assert infer_encoding("model.YML") == "yaml"
    assert infer_encoding("model.bin", "binary") == "binary"

    with pytest.raises(SerializationError):
        infer_encoding("model.bin")
    with pytest.raises(SerializationError):
        infer_encoding("model.json", "xml")


def test_corrupt_payloads_raise_serialization_error():
    with pytest.raises(SerializationError):
        decode_state(b"not json", "json")
    with pytest.raises(SerializationError):
        decode_state(b"- just\n- a list\n", "yaml")
    with pytest.raises(SerializationError):
        decode_state(b"\x00\x01garbage", "binary")
    with pytest.raises(SerializationError):
        decode_state(b'{"l": 1, "m": 1}', "json")
    with pytest.raises(SerializationError):
        encode_state({}, "xml")


def test_inconsistent_state_is_rejected():
    model = DrusillaSelect(l=2, m=2)
    state = {
        "candidate_set": np.zeros((3, 2)),
        "candidate_indices": np.arange(3),
        "l": 2,
        "m": 2,
    }

    with pytest.raises(SerializationError):
        model.load_state_dict(state)

    state["candidate_indices"] = np.arange(4)
    state["candidate_set"] = np.zeros((4, 2))
    state["l"] = 0
    with pytest.raises(SerializationError):
        model.load_state_dict(state)

    with pytest.raises(SerializationError):
        model.load_state_dict({"l": 2, "m": 2})

    assert not model.is_trained


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        DrusillaSelect.load(tmp_path / "missing.npz")
