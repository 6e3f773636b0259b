"""Failure policy per operation kind.

Components look up the policy for an operation instead of deciding locally
whether a failing command may be ignored.
"""

from enum import Enum


class Policy(str, Enum):
    FATAL = "fatal"  # Raise; aborts the enclosing installer
    WARN = "warn"  # Log and show a notice, continue
    IGNORE = "ignore"  # Log at debug level only, continue


class Operation(str, Enum):
    CLONE = "clone"
    FETCH = "fetch"
    RESET = "reset"
    CLEAN = "clean"
    SUBMODULE_UPDATE = "submodule_update"
    QUERY_REMOTE_DEFAULT = "query_remote_default"
    QUERY_CURRENT_BRANCH = "query_current_branch"
    CARGO_CLEAN = "cargo_clean"
    CARGO_BUILD = "cargo_build"
    EXTENSION_UNINSTALL = "extension_uninstall"
    EXTENSION_INSTALL = "extension_install"
    PACKAGE_INSTALL = "package_install"
    PACKAGE_REMOVE = "package_remove"
    RC_EDIT = "rc_edit"
    VELA_CLI = "vela_cli"
    NVM_COMMAND = "nvm_command"
    TOOLCHAIN_SETUP = "toolchain_setup"


FAILURE_POLICY: dict[Operation, Policy] = {
    Operation.CLONE: Policy.FATAL,
    Operation.FETCH: Policy.WARN,
    Operation.RESET: Policy.WARN,
    Operation.CLEAN: Policy.WARN,
    Operation.SUBMODULE_UPDATE: Policy.WARN,
    # Query results feed the default-branch fallback chain
    Operation.QUERY_REMOTE_DEFAULT: Policy.IGNORE,
    Operation.QUERY_CURRENT_BRANCH: Policy.IGNORE,
    Operation.CARGO_CLEAN: Policy.IGNORE,
    Operation.CARGO_BUILD: Policy.WARN,
    Operation.EXTENSION_UNINSTALL: Policy.IGNORE,
    Operation.EXTENSION_INSTALL: Policy.WARN,
    Operation.PACKAGE_INSTALL: Policy.FATAL,
    Operation.PACKAGE_REMOVE: Policy.IGNORE,
    Operation.RC_EDIT: Policy.WARN,
    Operation.VELA_CLI: Policy.WARN,
    Operation.NVM_COMMAND: Policy.WARN,
    Operation.TOOLCHAIN_SETUP: Policy.WARN,
}


def policy_for(operation: Operation) -> Policy:
    return FAILURE_POLICY[operation]
