"""
This file is part of smtpdump (https://github.com/spezifisch/smtpdump).
Copyright (c) 2022 spezifisch (https://github.com/spezifisch)

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, version 3 of the License.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <http://www.gnu.org/licenses/>.
"""

import os
import ssl
import tempfile
import unittest
from unittest.mock import patch

from click.testing import CliRunner
from loguru import logger

from smtpdump import __version__, smtpdump_cli
from smtpdump.policies import DiscardDisposition, PersistDisposition
from smtpdump.smtpdump_server import serve

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")
TEST_CERT = os.path.join(DATA_DIR, "cert.pem")
TEST_KEY = os.path.join(DATA_DIR, "key.pem")


def test_version() -> None:
    assert __version__ == "0.1.0"


class TestSmtpdumpCLI(unittest.TestCase):
    def setUp(self) -> None:
        self.mock_serve = patch("smtpdump.smtpdump_server.serve", spec_set=serve).start()
        self.addCleanup(patch.stopall)

        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def invoke(self, *args: str):  # type: ignore
        runner = CliRunner()
        return runner.invoke(smtpdump_cli.run, ["--output", self.tmpdir.name, *args])

    def serve_args(self):  # type: ignore
        self.mock_serve.assert_called_once()
        return self.mock_serve.call_args

    def test_help(self) -> None:
        runner = CliRunner()
        result = runner.invoke(smtpdump_cli.run, ["--help"])
        assert result.exit_code == 0
        assert result.output.startswith("Usage:")

    def test_defaults(self) -> None:
        result = self.invoke()
        assert result.exit_code == 0

        args, kwargs = self.serve_args()
        handler, authenticator, host, port, hostname = args
        assert (host, port) == ("127.0.0.1", 2525)
        assert hostname
        assert kwargs["tls_context"] is None
        assert kwargs["transcript"] is None

        disposition = handler.disposition_policy
        assert isinstance(disposition, PersistDisposition)
        assert disposition.output_dir == os.path.abspath(self.tmpdir.name)
        assert disposition.extension == "eml"
        assert disposition.verbose is False

    def test_options(self) -> None:
        result = self.invoke("--addr", "[::1]:25", "--hostname", "mx.example.com", "--extension", "txt", "--verbose")
        assert result.exit_code == 0

        args, _ = self.serve_args()
        handler, _, host, port, hostname = args
        assert (host, port, hostname) == ("::1", 25, "mx.example.com")
        assert handler.disposition_policy.extension == "txt"
        assert handler.disposition_policy.verbose is True

    def test_discard(self) -> None:
        result = self.invoke("--discard", "--verbose")
        assert result.exit_code == 0

        args, _ = self.serve_args()
        assert isinstance(args[0].disposition_policy, DiscardDisposition)
        assert args[0].disposition_policy.verbose is True

    def test_debug_enables_transcript(self) -> None:
        result = self.invoke("--debug", "--no-color")
        assert result.exit_code == 0
        assert "level=10" in str(logger)  # hacky but loguru doesn't have a way to request the loglevel

        _, kwargs = self.serve_args()
        assert kwargs["transcript"] is not None
        assert kwargs["transcript"].colorize is False

    def test_loglevel_trace(self) -> None:
        result = self.invoke("--trace")
        assert result.exit_code == 0
        assert "level=5" in str(logger)

    def test_tls(self) -> None:
        result = self.invoke("--cert", TEST_CERT, "--key", TEST_KEY, "--tls12", "--tls13")
        assert result.exit_code == 0
        assert "Enabled TLS support" in result.output

        _, kwargs = self.serve_args()
        assert isinstance(kwargs["tls_context"], ssl.SSLContext)
        assert kwargs["tls_context"].minimum_version == ssl.TLSVersion.TLSv1_3

    def test_tls_invalid(self) -> None:
        result = self.invoke("--cert", TEST_CERT, "--key", "not-an-existing-file-foo.bar")
        assert result.exit_code == 1
        assert "couldn't load certificate or key" in result.output
        self.mock_serve.assert_not_called()

    def test_empty_hostname(self) -> None:
        result = self.invoke("--hostname", "")
        assert result.exit_code == 1
        assert "Hostname cannot be empty" in result.output
        self.mock_serve.assert_not_called()

    def test_invalid_addr(self) -> None:
        result = self.invoke("--addr", "localhost")
        assert result.exit_code == 1
        assert "missing a port" in result.output

    def test_output_not_found(self) -> None:
        result = self.invoke("--output", os.path.join(self.tmpdir.name, "gone"))
        assert result.exit_code == 1
        assert "doesn't exist" in result.output

    def test_empty_output_is_tempdir(self) -> None:
        result = self.invoke("--output", "")
        assert result.exit_code == 0

        args, _ = self.serve_args()
        assert args[0].disposition_policy.output_dir == os.path.abspath(tempfile.gettempdir())

    def test_config_not_found(self) -> None:
        result = self.invoke("--config", "not-an-existing-file-foo.bar")
        assert result.exit_code == 1
        assert "No such file" in result.output

    def test_config_invalid(self) -> None:
        result = self.invoke("--config", os.path.join(DATA_DIR, "config.invalid.yaml"))
        assert result.exit_code == 1
        assert "config file parsing error" in result.output

    def test_config(self) -> None:
        result = self.invoke("--config", os.path.join(DATA_DIR, "success.yaml"))
        assert result.exit_code == 0

        args, _ = self.serve_args()
        handler, _, host, port, hostname = args
        assert (host, port, hostname) == ("127.0.0.1", 2626, "capture.example.com")
        assert isinstance(handler.disposition_policy, DiscardDisposition)

    def test_command_line_overrides_config(self) -> None:
        result = self.invoke("--config", os.path.join(DATA_DIR, "success.yaml"), "--addr", "127.0.0.1:2727")
        assert result.exit_code == 0

        args, _ = self.serve_args()
        assert args[2:4] == ("127.0.0.1", 2727)

    def test_bind_error(self) -> None:
        self.mock_serve.side_effect = OSError("address already in use")

        result = self.invoke()
        assert result.exit_code == 1
        assert "server error: address already in use" in result.output

    def test_interrupted(self) -> None:
        self.mock_serve.side_effect = KeyboardInterrupt()

        result = self.invoke()
        assert result.exit_code == 0
        assert "shutting down" in result.output

    def test_config_min_version(self) -> None:
        result = self.invoke(
            "--config", os.path.join(DATA_DIR, "success.yaml"), "--cert", TEST_CERT, "--key", TEST_KEY
        )
        assert result.exit_code == 0

        _, kwargs = self.serve_args()
        assert kwargs["tls_context"].minimum_version == ssl.TLSVersion.TLSv1_3

    def test_command_line_tls_flag_overrides_config_min_version(self) -> None:
        result = self.invoke(
            "--config", os.path.join(DATA_DIR, "success.yaml"), "--cert", TEST_CERT, "--key", TEST_KEY, "--tls12"
        )
        assert result.exit_code == 0

        _, kwargs = self.serve_args()
        assert kwargs["tls_context"].minimum_version == ssl.TLSVersion.TLSv1_2
