"""CLI entry point."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence
from pathlib import Path

import yaml

from .config import BridgeConfig, ConfigError, load_config_file, load_from_env, merge_config
from .errors import ForumBridgeError
from .forum import ForumClient
from .logging_config import configure_logging
from .models import ThreadMessage


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="forum-bridge", description="Manage GitHub threads in a Discord forum channel."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    tag = sub.add_parser("tag", help="get or create the forum tag for a repository")
    tag.add_argument("repo")

    create = sub.add_parser("create", help="open a new forum thread")
    create.add_argument("title")
    create.add_argument("--content", required=True)
    create.add_argument("--repo", help="apply the repository's forum tag")

    post = sub.add_parser("post", help="post a message to an existing thread")
    post.add_argument("thread_id")
    post.add_argument("--content", required=True)

    archive = sub.add_parser("archive", help="archive a thread")
    archive.add_argument("thread_id")
    return parser


def load_config(env: dict[str, str]) -> BridgeConfig:
    config = load_from_env(env)
    if env.get("FORUM_BRIDGE_CONFIG"):
        config = merge_config(load_config_file(Path(env["FORUM_BRIDGE_CONFIG"])), config)
    return config


def run(client: ForumClient, args: argparse.Namespace) -> str | None:
    if args.command == "tag":
        return client.get_or_create_repo_tag(args.repo)
    if args.command == "create":
        tags = [client.get_or_create_repo_tag(args.repo)] if args.repo else []
        return client.create_thread(args.title, ThreadMessage(content=args.content), *tags)
    if args.command == "post":
        client.post_message(args.thread_id, ThreadMessage(content=args.content))
        return None
    client.archive_thread(args.thread_id)
    return None


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(dict(os.environ)).require()
    except (ConfigError, ValueError, yaml.YAMLError) as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return 2
    configure_logging(config.environment, config.log_level)

    client = ForumClient.create(
        config.discord_token,
        config.forum_channel_id,
        base_url=config.api_base,
        timeout=config.timeout,
    )
    with client:
        try:
            result = run(client, args)
        except ForumBridgeError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
    if result is not None:
        print(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
