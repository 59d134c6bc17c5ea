import importlib
import logging
import os

import main
from persistence.store import JsonFileStore


def test_import_does_not_configure_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    importlib.reload(main)
    assert calls == []


def test_parse_args_defaults():
    args = main.parse_args([])
    assert not args.headless
    assert args.population == 200
    assert args.seed is None


def test_headless_run_trains_and_saves(tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    data_dir = str(tmp_path / "data")
    main.main([
        "--headless", "--generations", "2", "--population", "3",
        "--max-ticks", "5", "--seed", "1", "--data-dir", data_dir,
    ])
    assert calls == [{"level": logging.INFO}]
    assert os.path.exists(os.path.join(data_dir, "training-checkpoint.json"))
    # a full save queue may drop later checkpoints, never the first
    assert JsonFileStore(data_dir).load_checkpoint().generation >= 1
