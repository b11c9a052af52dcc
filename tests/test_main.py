from pathlib import Path

from click.testing import CliRunner

from stock_charts import config, main
from stock_charts.config import Settings
from stock_charts.controller import ChartApp


def test_cli_exits_when_api_key_missing(monkeypatch):
  monkeypatch.setattr(config, "load_dotenv", lambda: None)
  monkeypatch.delenv("ALPHA_VANTAGE_API_KEY", raising=False)

  result = CliRunner().invoke(main.cli)

  assert result.exit_code == 1


def test_cli_runs_menu_until_exit(monkeypatch, tmp_path):
  monkeypatch.setattr(config, "load_dotenv", lambda: None)
  monkeypatch.setenv("ALPHA_VANTAGE_API_KEY", "demo")
  monkeypatch.setenv("STOCK_CHARTS_INSTRUMENTS_FILE", str(tmp_path / "instruments.json"))

  result = CliRunner().invoke(main.cli, input="2\n5\n")

  assert result.exit_code == 0
  assert "No saved instruments found." in result.output


def test_build_app_wires_settings(tmp_path):
  settings = Settings(
    api_key="demo",
    min_request_interval=2.0,
    instruments_file=tmp_path / "watch.json",
    output_dir=tmp_path / "charts",
    search_probe="IBM",
  )

  app = main.build_app(settings)

  assert isinstance(app, ChartApp)
  assert app.client.rate_limiter.min_interval_seconds == 2.0
  assert app.client.search_probe == "IBM"
  assert app.repository.storage_file == tmp_path / "watch.json"
  assert app.renderer.output_dir == Path(tmp_path / "charts")
