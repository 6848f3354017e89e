"""
CLI Integration Tests
=====================

Tests the complete CLI interface: reading a configuration document and a font
directory, resolving languages and exporting the stylesheet.
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from main import cli


class TestCLIIntegration:
    """CLI integration tests."""

    @pytest.fixture
    def runner(self):
        """Click test runner."""
        return CliRunner()

    @pytest.fixture(autouse=True)
    def workdir(self, tmp_path, monkeypatch):
        """Run from an empty directory so no stray .env is picked up."""
        monkeypatch.chdir(tmp_path)
        return tmp_path

    @pytest.fixture
    def fonts_dir(self, tmp_path, font_bytes):
        """Directory with the font files the sample document references."""
        directory = tmp_path / "fonts"
        directory.mkdir()
        (directory / "Inter.ttf").write_bytes(font_bytes(family="Inter"))
        (directory / "notojp.TTF").write_bytes(font_bytes(family="Noto JP", axis=(100, 400, 900)))
        return directory

    @pytest.fixture
    def config_path(self, tmp_path):
        """Sample configuration document."""
        document = {
            "metadata": {"version": 1, "timestamp": "2024-01-01T00:00:00+00:00", "appName": "Test"},
            "data": {
                "fontStyles": {
                    "primary": {
                        "fonts": [
                            {"id": "a", "type": "primary", "name": "Inter", "fileName": "Inter.ttf"},
                            {"id": "b", "name": "Noto JP", "fileName": "NotoJP.ttf"},
                            {"id": "c", "name": "Arial"},
                        ],
                        "fallbackFontOverrides": {"ja-JP": "b"},
                        "lineHeightOverrides": {"ar": 1.6},
                    }
                },
                "configuredLanguages": ["en-US", "ja-JP", "ar"],
                "primaryLanguages": ["en-US"],
            },
        }
        path = tmp_path / "config.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    def test_cli_help(self, runner):
        """Test that CLI help works."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "export-css" in result.output
        assert "resolve" in result.output
        assert "required-fonts" in result.output

    def test_required_fonts(self, runner, config_path):
        result = runner.invoke(cli, ["required-fonts", "-c", str(config_path)])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["Inter.ttf", "NotoJP.ttf"]

    def test_required_fonts_with_directory(self, runner, config_path, fonts_dir):
        result = runner.invoke(cli, ["required-fonts", "-c", str(config_path), "-f", str(fonts_dir)])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["Inter.ttf\tfound", "NotoJP.ttf\tfound"]

    def test_required_fonts_missing(self, runner, config_path, fonts_dir):
        (fonts_dir / "notojp.TTF").unlink()

        result = runner.invoke(cli, ["required-fonts", "-c", str(config_path), "-f", str(fonts_dir)])

        assert result.exit_code == 2
        assert "NotoJP.ttf\tmissing" in result.stdout

    def test_resolve(self, runner, config_path, fonts_dir):
        result = runner.invoke(cli, ["resolve", "-c", str(config_path), "-f", str(fonts_dir)])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "Language Resolution"
        assert "en-US: Inter [primary] scale=100% line-height=1.2 weight=400" in lines
        assert "ja-JP: Noto JP [language-override] scale=100% line-height=1.2 weight=400" in lines
        assert "ar: Noto JP [auto-fallback] scale=100% line-height=1.6 weight=400" in lines

    def test_resolve_selected_languages(self, runner, config_path, fonts_dir):
        result = runner.invoke(
            cli, ["resolve", "-c", str(config_path), "-f", str(fonts_dir), "-l", "ar", "-l", "en-US"]
        )

        assert result.exit_code == 0
        entries = [line.split(":")[0] for line in result.stdout.splitlines()[2:]]
        assert entries == ["en-US", "ar"]

    def test_resolve_without_font_files(self, runner, config_path):
        """Uploaded fonts cannot be matched, so only the system font is left and it cannot lead."""
        result = runner.invoke(cli, ["resolve", "-c", str(config_path)])

        assert result.exit_code == 0
        assert "No fonts in the stack" in result.stdout

    def test_resolve_keep_unresolved(self, runner, config_path):
        result = runner.invoke(cli, ["resolve", "-c", str(config_path), "--keep-unresolved"])

        assert result.exit_code == 0
        assert "en-US: Inter [primary]" in result.stdout

    def test_export_css(self, runner, config_path, fonts_dir):
        result = runner.invoke(
            cli,
            [
                "export-css",
                "-c",
                str(config_path),
                "-f",
                str(fonts_dir),
                "--font-face",
                "--font-url-prefix",
                "fonts/",
            ],
        )

        assert result.exit_code == 0
        css = result.stdout
        assert css.startswith("/* Generated by Localize Type */")
        assert "src: url('fonts/Inter.ttf') format('truetype');" in css
        assert "src: url('fonts/NotoJP.ttf') format('truetype');" in css
        assert "font-weight: 100 900;" in css
        assert '[lang="ja-JP"]' in css
        assert '[lang="ar"] {\n  line-height: 1.6;\n}' in css

    def test_export_css_to_file_minified(self, runner, config_path, fonts_dir, tmp_path):
        output = tmp_path / "out" / "fonts.css"

        result = runner.invoke(
            cli,
            ["export-css", "-c", str(config_path), "-f", str(fonts_dir), "-o", str(output), "--minify"],
        )

        assert result.exit_code == 0
        css = output.read_text(encoding="utf-8")
        assert "\n" not in css
        assert ":root {" in css

    def test_export_css_with_settings(self, runner, config_path, fonts_dir, tmp_path):
        settings_path = tmp_path / "settings.yaml"
        with open(settings_path, "w") as f:
            yaml.dump(
                {
                    "log_level": "WARNING",
                    "css_export": {"include_comments": False, "use_css_variables": False},
                },
                f,
            )

        result = runner.invoke(
            cli, ["export-css", "-c", str(config_path), "-f", str(fonts_dir), "-s", str(settings_path)]
        )

        assert result.exit_code == 0
        assert "/*" not in result.stdout
        assert ":root" not in result.stdout
        assert "h1 {" in result.stdout

    def test_invalid_document(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"unrelated": True}), encoding="utf-8")

        result = runner.invoke(cli, ["export-css", "-c", str(path)])

        assert result.exit_code == 1

    def test_newer_document_version(self, runner, tmp_path):
        path = tmp_path / "future.json"
        path.write_text(json.dumps({"metadata": {"version": 99}, "data": {}}), encoding="utf-8")

        result = runner.invoke(cli, ["required-fonts", "-c", str(path)])

        assert result.exit_code == 1

    def test_missing_config_path(self, runner):
        result = runner.invoke(cli, ["resolve", "-c", "does-not-exist.json"])

        assert result.exit_code != 0
