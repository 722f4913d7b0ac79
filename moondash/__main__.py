import argparse
import logging
import sys
from datetime import date
from functools import partial
from pathlib import Path

import httpx
import yaml

from moondash.config import config
from moondash.exceptions import MoondashError
from moondash.output import write_dashboard
from moondash.registry import load_registry_index
from moondash.runner.build import BuildRunner
from moondash.runner.fetch import Fetcher
from moondash.runner.matrix import MatrixRunner
from moondash.runner.runner import Runner
from moondash.sources import (
    get_sources,
    load_exclude_config,
    load_repos_config,
    org_predicate,
)
from moondash.toolchain import Toolchain

logger = logging.getLogger('moondash')


def stat(args: argparse.Namespace):
    repos = load_repos_config(args.file) if args.file else None
    sources = get_sources(repos, repo_url=args.repo_url, repo_revs=args.rev)
    toolchain = Toolchain(config.moon_bin, config.moonc_bin)
    matrix = MatrixRunner(
        toolchain,
        org_predicate(config.first_party_org),
        utc_offset_hours=config.utc_offset_hours,
    )
    with httpx.Client(follow_redirects=True) as client:
        fetcher_factory = partial(
            Fetcher,
            client=client,
            registry_base_url=config.registry_base_url,
            git=config.git_bin,
        )
        runner = Runner(
            sources,
            toolchain,
            BuildRunner(matrix, fetcher_factory),
            run_id=config.run_id,
            run_number=config.run_number,
            skip_install=args.skip_install,
            skip_update=args.skip_update,
        )
        dashboard = runner.run()
    write_dashboard(dashboard, args.output_dir, toolchain.host_os, date.today())


def gen_list(args: argparse.Namespace):
    repos = load_repos_config(args.file)
    exclude = load_exclude_config(args.exclude).exclude if args.exclude else []
    db = load_registry_index(args.index_dir)
    repos.mooncakes = db.latest_packages(set(exclude))
    args.file.write_text(
        yaml.safe_dump(
            repos.model_dump(mode='json', by_alias=True, exclude_none=True),
            sort_keys=False,
        )
    )
    logger.info(f'Wrote {len(repos.mooncakes)} packages to {args.file}')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='moondash')
    subparsers = parser.add_subparsers(dest='command', required=True)

    stat_parser = subparsers.add_parser('stat', help='run the build matrix')
    stat_parser.add_argument('--file', type=Path, help='source declaration file')
    stat_parser.add_argument('--repo-url', help='extra git repository to test')
    stat_parser.add_argument(
        '--rev', action='append', help='revision of --repo-url, repeatable'
    )
    stat_parser.add_argument('--skip-install', action='store_true')
    stat_parser.add_argument('--skip-update', action='store_true')
    stat_parser.add_argument('--output-dir', type=Path, default=config.output_dir)
    stat_parser.set_defaults(func=stat)

    gen_parser = subparsers.add_parser(
        'gen-list', help='fill the declaration file with the latest registry packages'
    )
    gen_parser.add_argument('--file', type=Path, required=True)
    gen_parser.add_argument('--exclude', type=Path, help='exclusion list file')
    gen_parser.add_argument(
        '--index-dir', type=Path, default=config.registry_index_dir
    )
    gen_parser.set_defaults(func=gen_list)
    return parser


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except MoondashError as e:
        logger.error(f'{type(e).__name__}: {e}')
        sys.exit(1)


if __name__ == '__main__':
    main()
