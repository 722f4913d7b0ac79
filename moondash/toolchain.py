import logging
import os
from pathlib import Path

from moondash.const import UNIX_INSTALL_SCRIPT, WINDOWS_INSTALL_SCRIPT
from moondash.exceptions import CommandError, ToolchainError
from moondash.runner.command import CommandOutput, run_command
from moondash.schemas import OS, ToolChainLabel, ToolChainVersion
from moondash.utils import check_output, current_os, get_bin

logger = logging.getLogger(__name__)


class Toolchain:
    """
    Wrapper around the ``moon`` and ``moonc`` binaries.

    Installation, update and version discovery are fatal on failure and
    raise ``ToolchainError``. ``run`` is the per-cell command runner.
    """

    moon_bin: str
    moonc_bin: str
    host_os: OS

    def __init__(
        self, moon_bin: str = 'moon', moonc_bin: str = 'moonc', host_os: OS = None
    ):
        self.moon_bin = moon_bin
        self.moonc_bin = moonc_bin
        self.host_os = host_os or current_os()

    def run(self, workdir: Path, args: list[str]) -> CommandOutput:
        return run_command(get_bin(self.moon_bin), args, workdir)

    def _check_output(self, *args: str, **kwargs) -> str:
        try:
            return check_output(*args, **kwargs)
        except CommandError as e:
            raise ToolchainError(f'toolchain operation failed: {e}') from e

    def install(self, label: ToolChainLabel):
        logger.info(f'Installing {label.value} toolchain')
        if self.host_os == OS.windows:
            env = os.environ.copy()
            if label == ToolChainLabel.bleeding:
                env['MOONBIT_INSTALL_VERSION'] = 'bleeding'
            self._check_output(
                'powershell',
                '-Command',
                'Set-ExecutionPolicy RemoteSigned -Scope CurrentUser; '
                f'irm {WINDOWS_INSTALL_SCRIPT} | iex',
                env=env,
            )
        else:
            script = self._check_output(get_bin('curl'), '-fsSL', UNIX_INSTALL_SCRIPT)
            args = ['-s', 'bleeding'] if label == ToolChainLabel.bleeding else ['-s']
            self._check_output(get_bin('bash'), *args, input=script.encode())
        versions = self._check_output(get_bin(self.moon_bin), 'version', '--all')
        logger.info(f'Version command output: {versions}')

    def update(self):
        self._check_output(get_bin(self.moon_bin), 'update')

    def version(self, label: ToolChainLabel) -> ToolChainVersion:
        return ToolChainVersion(
            label=label,
            moon_version=self._check_output(get_bin(self.moon_bin), 'version').strip(),
            moonc_version=self._check_output(get_bin(self.moonc_bin), '-v').strip(),
        )
