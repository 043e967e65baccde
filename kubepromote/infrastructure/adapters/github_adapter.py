"""
GitHub GitOps Adapter

Architectural Intent:
- Implements GitOpsPort by editing the image policy file a reconciling
  deployment system (Flux) watches
- The only edit ever made is the single `range: '<version>'` pin; the rest of
  the file is left byte-for-byte intact

Design Decisions:
- One file per namespace, located by a configurable path template
- The prod namespace lives on its own branch; everything else on main
- Read-modify-write uses the blob SHA, so a concurrent edit makes the commit
  fail instead of silently overwriting it
- Already-pinned versions are a no-op: no commit is made
"""

import asyncio
import logging
import re
from typing import Optional

from github import Auth, Github, GithubException

from kubepromote.domain.errors import ExternalMutationFailed
from kubepromote.domain.ports.gitops_port import GitOpsPort
from kubepromote.infrastructure.config import GitOpsConfig

logger = logging.getLogger(__name__)

_RANGE_RE = re.compile(r"range: '.*'")


def pin_version(content: str, version: str) -> str:
    """Rewrite every `range: '...'` pin in ``content`` to ``version``."""
    return _RANGE_RE.sub(lambda _: f"range: '{version}'", content)


class GitHubAdapter(GitOpsPort):
    """Pins versions by committing to the GitOps repository on GitHub."""

    def __init__(
        self, settings: GitOpsConfig, github: Optional[Github] = None
    ) -> None:
        self._settings = settings
        self._github = github

    def _client(self) -> Github:
        if self._github is None:
            self._github = Github(auth=Auth.Token(self._settings.token))
        return self._github

    def branch_for(self, namespace: str) -> str:
        if namespace == self._settings.prod_namespace:
            return self._settings.prod_branch
        return self._settings.default_branch

    def path_for(self, namespace: str) -> str:
        return self._settings.path_template.format(namespace=namespace)

    async def set_version(
        self, namespace: str, version: str, change_description: str
    ) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self._set_version, namespace, version, change_description
        )

    def _set_version(
        self, namespace: str, version: str, change_description: str
    ) -> bool:
        path = self.path_for(namespace)
        branch = self.branch_for(namespace)
        full_name = f"{self._settings.owner}/{self._settings.repo}"

        try:
            repo = self._client().get_repo(full_name)
            contents = repo.get_contents(path, ref=branch)
            if isinstance(contents, list):
                raise ExternalMutationFailed(
                    namespace, version, f"{path} is a directory"
                )
            current = contents.decoded_content.decode("utf-8")

            if f"range: '{version}'" in current:
                logger.info("%s on %s already pins %s", path, branch, version)
                return False

            if not _RANGE_RE.search(current):
                raise ExternalMutationFailed(
                    namespace, version, f"no version pin found in {path}"
                )

            message = f"{change_description} version {version} to {namespace}"
            repo.update_file(
                path,
                message,
                pin_version(current, version),
                contents.sha,
                branch=branch,
            )
        except GithubException as e:
            raise ExternalMutationFailed(
                namespace, version, f"GitHub API error {e.status}: {e.data}"
            ) from e

        logger.info("Committed %r to %s@%s", message, full_name, branch)
        return True
