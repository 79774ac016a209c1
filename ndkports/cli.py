#
# Copyright (C) 2019 The Android Open Source Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
"""Command line interface for building ports.

Run with `poetry run ndkports`.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
import subprocess
from typing import Optional, Tuple

from aiohttp import ClientError
import click

from ndkports.abis import ALL_ABIS, MIN_API_LEVEL, Abi
from ndkports.builder import PortBuilder
from ndkports.cmake import ToolNotFoundError
from ndkports.config import ConfigError, PortsConfig, find_ndk_path
from ndkports.ndk import NdkError, NdkInstallation, resolve, resolve_from_config
from ndkports.port import PortValidateError
from ndkports.ports import ALL_PORTS, get_port
from ndkports.prefab import PrefabError
from ndkports.source import PortSource, SourceVerificationError


BUILD_ERRORS = (
    ConfigError,
    NdkError,
    PortValidateError,
    PrefabError,
    SourceVerificationError,
    ToolNotFoundError,
    subprocess.CalledProcessError,
    ClientError,
    FileNotFoundError,
)


@dataclass
class CliState:
    ndk_path: Optional[Path]


def describe_ndk(ndk: NdkInstallation) -> str:
    return "\n".join(
        [
            f"NDK: {ndk.path}",
            f"Version: {ndk.version}",
            f"Host tag: {ndk.host_tag}",
            f"Toolchain bin directory: {ndk.toolchain_bin_directory}",
            f"Sysroot directory: {ndk.sysroot_directory}",
        ]
    )


@click.group()
@click.option(
    "-v",
    "--verbose",
    count=True,
    default=0,
    help="Increase verbosity (repeatable).",
)
@click.option(
    "--ndk-path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Path to the NDK. Defaults to $ANDROID_NDK_ROOT or $ANDROID_NDK_HOME.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, ndk_path: Optional[Path]) -> None:
    """Packages third-party native libraries as Prefab AARs."""
    log_levels = [logging.WARNING, logging.INFO, logging.DEBUG]
    logging.basicConfig(level=log_levels[min(verbose, len(log_levels) - 1)])
    ctx.obj = CliState(ndk_path)


@cli.command()
@click.pass_obj
def info(state: CliState) -> None:
    """Shows the toolchain layout of the configured NDK."""
    try:
        ndk = resolve(find_ndk_path(state.ndk_path))
    except (ConfigError, NdkError) as ex:
        raise click.ClickException(str(ex)) from ex
    click.echo(describe_ndk(ndk))


@cli.command()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("ports.json"),
    show_default=True,
    help="JSON file with per-port settings such as libVersion.",
)
@click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for intermediates. Defaults to $OUT_DIR or ./out.",
)
@click.option(
    "--dist-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for distribution zips. Defaults to $DIST_DIR or <out>/dist.",
)
@click.option(
    "--min-sdk-version",
    type=click.IntRange(min=MIN_API_LEVEL),
    default=MIN_API_LEVEL,
    show_default=True,
)
@click.option(
    "--abi",
    "abis",
    type=click.Choice(ALL_ABIS),
    multiple=True,
    help="ABI to build (repeatable). Defaults to all 32- and 64-bit ARM and x86 ABIs.",
)
@click.option(
    "--source",
    help="URL or local path of the source archive. Only valid with a single port.",
)
@click.option("--group", help="Maven group ID for published artifacts.")
@click.option("--repository-url", help="Project URL used in published POMs.")
@click.option("--sign", is_flag=True, help="Sign published artifacts with gpg.")
@click.argument("ports", nargs=-1, required=True, type=click.Choice(sorted(ALL_PORTS)))
@click.pass_obj
def build(
    state: CliState,
    config_file: Path,
    out_dir: Optional[Path],
    dist_dir: Optional[Path],
    min_sdk_version: int,
    abis: Tuple[str, ...],
    source: Optional[str],
    group: Optional[str],
    repository_url: Optional[str],
    sign: bool,
    ports: Tuple[str, ...],
) -> None:
    """Builds, packages, and publishes PORTS."""
    if source is not None and len(ports) > 1:
        raise click.UsageError("--source can only be used when building one port")

    try:
        config = PortsConfig.create(
            ndk_path=state.ndk_path,
            out_dir=out_dir,
            dist_dir=dist_dir,
            config_file=config_file,
            min_sdk_version=min_sdk_version,
            abis=[Abi(abi) for abi in abis],
            group=group,
            repository_url=repository_url,
            sign=sign,
        )
        ndk = resolve_from_config(config)
        for name in ports:
            port_source = PortSource.from_str(source) if source is not None else None
            builder = PortBuilder(get_port(name), config, ndk, port_source)
            dist = asyncio.run(builder.run())
            click.echo(f"{name}: {dist}")
    except BUILD_ERRORS as ex:
        raise click.ClickException(str(ex)) from ex


def main() -> None:
    cli()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
