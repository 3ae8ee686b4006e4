"""
Tests for the command-line interface.
"""

from unittest.mock import MagicMock, patch

import pytest

from imagesync.cli import build_parser, main
from imagesync.exceptions import ClientConstructionError, RemoteError


@pytest.fixture
def engine():
    client = MagicMock()
    client.__enter__.return_value = client
    with patch("imagesync.cli.EngineClient.from_env", return_value=client) as from_env:
        yield client, from_env


class TestParser:
    """Test argument parsing."""

    def test_defaults(self):
        """Test the default retry and progress settings."""
        args = build_parser().parse_args(["pull", "nginx"])

        assert args.max_retries == 3
        assert args.retry_delay == 5.0
        assert args.progress_every == 25

    def test_sync_options(self):
        """Test sync options."""
        args = build_parser().parse_args([
            "sync", "--registry", "registry.example.com", "--namespace", "mirror",
            "--max-workers", "4", "nginx", "redis:7",
        ])

        assert args.images == ["nginx", "redis:7"]
        assert args.max_workers == 4


class TestCommands:
    """Test command handlers."""

    def test_no_command_prints_help(self, capsys):
        """Test that no subcommand shows help."""
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_pull(self, engine):
        """Test pulling several images."""
        client, from_env = engine

        assert main(["pull", "nginx:1.21", "redis:7", "--max-retries", "5", "--retry-delay", "1"]) == 0

        assert [c.args[0] for c in client.pull.call_args_list] == ["nginx:1.21", "redis:7"]
        policy = from_env.call_args.kwargs["retry_policy"]
        assert policy.attempts == 5
        assert policy.delay == 1.0

    def test_push_failure(self, engine):
        """Test that a failed push gives exit code 1."""
        client, _ = engine
        client.push.side_effect = RemoteError("denied: requested access to the resource is denied")

        assert main(["push", "registry.example.com/app:1.0"]) == 1

    def test_client_construction_failure(self):
        """Test that an unreachable engine gives exit code 1."""
        with patch(
            "imagesync.cli.EngineClient.from_env",
            side_effect=ClientConstructionError("new docker client: refused"),
        ):
            assert main(["pull", "nginx"]) == 1

    def test_sync_requires_registry(self):
        """Test that sync without a registry fails."""
        assert main(["sync", "nginx"]) == 1

    def test_sync(self):
        """Test sync delegates to MirrorSync."""
        with patch("imagesync.cli.MirrorSync") as mirror_sync:
            mirror_sync.return_value.sync_images.return_value = {"success_count": 1, "fail_count": 0}

            assert main(["sync", "--registry", "registry.example.com", "nginx:1.21"]) == 0

        mirror_sync.return_value.sync_images.assert_called_once_with(
            [("nginx:1.21", None)], use_concurrency=False
        )

    def test_sync_manifest(self, tmp_path):
        """Test sync reads images from a manifest file."""
        manifest_file = tmp_path / "images.yml"
        manifest_file.write_text(
            "images:\n  - source: nginx:1.21\n    target: registry.example.com/nginx:1.21\n",
            encoding="utf-8",
        )

        with patch("imagesync.cli.MirrorSync") as mirror_sync:
            mirror_sync.return_value.sync_images.return_value = {"success_count": 0, "fail_count": 1}

            assert main(["sync", "--manifest", str(manifest_file)]) == 1

        images = mirror_sync.return_value.sync_images.call_args.args[0]
        assert images == [("nginx:1.21", "registry.example.com/nginx:1.21")]

    def test_sync_bad_manifest(self, tmp_path):
        """Test that a broken manifest gives exit code 1."""
        assert main(["sync", "--registry", "r.example.com", "--manifest", str(tmp_path / "none.yml")]) == 1
