import runpy
from pathlib import Path

import flask
import pytest

import app_factory
from app_factory import create_app
from fleet.config import Config, TestConfig

ROOT = Path(__file__).resolve().parents[1]
RUN_PY = ROOT / "run.py"


class _Unreachable(TestConfig):
    SQLALCHEMY_DATABASE_URI = "sqlite:////nonexistent-dir/fleet.db"


class TestStartup:
    @pytest.mark.component
    def test_unreachable_store_is_fatal(self):
        with pytest.raises(SystemExit):
            create_app(_Unreachable)

    @pytest.mark.component
    def test_run_checks_the_store_once(self, monkeypatch):
        calls = []
        real_check = app_factory.check_connection
        monkeypatch.setattr(app_factory, "check_connection",
                            lambda app: calls.append(app) or real_check(app))
        monkeypatch.setattr(flask.Flask, "run", lambda self, **kwargs: None)
        monkeypatch.setattr(Config, "SQLALCHEMY_DATABASE_URI", "sqlite://")

        runpy.run_path(str(RUN_PY), run_name="__main__")
        assert len(calls) == 1


class TestPackaging:
    @pytest.mark.unit
    def test_example_env_driver_has_an_extra(self):
        lines = (ROOT / ".env.example").read_text().splitlines()
        env = dict(line.split("=", 1) for line in lines if "=" in line)
        assert env["DATABASE_URL"].startswith("mysql+pymysql://")
        assert 'mysql = ["PyMySQL"]' in (ROOT / "pyproject.toml").read_text()
