"""Bearer token resolution for outbound API calls."""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping, Optional, Sequence

from .errors import AuthenticationError


logger = logging.getLogger(__name__)

TOKEN_FLAG = "--token"


class TokenResolver:
    """Resolve the API token once and keep it for the life of the process.

    Sources are tried in order: the primary environment variable, the
    secondary one, then a ``--token <value>`` pair in the process arguments.
    """

    def __init__(
        self,
        primary_env_var: str = "API_TOKEN",
        secondary_env_var: str = "ACCESS_TOKEN",
        environ: Optional[Mapping[str, str]] = None,
        argv: Optional[Sequence[str]] = None,
    ) -> None:
        self.primary_env_var = primary_env_var
        self.secondary_env_var = secondary_env_var
        self._environ = environ
        self._argv = argv
        self._token: Optional[str] = None

    def resolve(self) -> str:
        if self._token:
            return self._token

        environ = os.environ if self._environ is None else self._environ
        token = environ.get(self.primary_env_var)
        source = self.primary_env_var
        if not token:
            token = environ.get(self.secondary_env_var)
            source = self.secondary_env_var
        if not token:
            token = self._scan_argv()
            source = TOKEN_FLAG

        if not token:
            raise AuthenticationError(
                f"No access token provided. Use {TOKEN_FLAG} argument or set "
                f"{self.primary_env_var} environment variable"
            )

        logger.info("Resolved API token from %s", source)
        self._token = token
        return token

    @property
    def cached(self) -> bool:
        return self._token is not None

    def _scan_argv(self) -> Optional[str]:
        argv = sys.argv if self._argv is None else self._argv
        try:
            index = list(argv).index(TOKEN_FLAG)
        except ValueError:
            return None
        if index + 1 < len(argv):
            return argv[index + 1] or None
        return None
