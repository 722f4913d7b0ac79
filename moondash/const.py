REGISTRY_BASE_URL = 'https://moonbitlang-mooncakes.s3.us-west-2.amazonaws.com/user'
UNIX_INSTALL_SCRIPT = 'https://cli.moonbitlang.com/install/unix.sh'
WINDOWS_INSTALL_SCRIPT = 'https://cli.moonbitlang.com/install/powershell.ps1'

FIRST_PARTY_ORG = 'moonbitlang'
REGISTRY_TEST_KEYWORD = 'mooncakes-test'
CLONE_DIRNAME = 'test'
ADHOC_REVISION = 'HEAD'
