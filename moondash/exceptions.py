class MoondashError(Exception):
    pass


class ConfigurationError(MoondashError):
    pass


class CommandError(MoondashError):
    cmd: str

    def __init__(self, cmd: str, message: str):
        super().__init__(f'{cmd}: {message}')
        self.cmd = cmd


class CommandSpawnError(CommandError):
    """The process could not be started at all"""


class CommandDecodeError(CommandError):
    pass


class CommandFailedError(CommandError):
    returncode: int

    def __init__(self, cmd: str, returncode: int):
        super().__init__(cmd, f'process exited with code {returncode}')
        self.returncode = returncode


class ToolchainError(MoondashError):
    pass


class FetchError(MoondashError):
    pass


class RegistryError(MoondashError):
    pass
