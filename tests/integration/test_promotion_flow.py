"""Integration test: promote a workload along the chain, then roll it back.

Uses the real composition root, SQLite history and GitOps pinning logic,
with only the cluster and the GitHub client replaced.
"""

import asyncio

import pytest
from unittest.mock import MagicMock

from kubepromote.composition_root import create_container
from kubepromote.domain.services.rollout_confirmation import WatchState
from kubepromote.domain.value_objects.command_context import CommandContext
from kubepromote.domain.value_objects.workload_instance import EventKind
from kubepromote.infrastructure.adapters.github_adapter import GitHubAdapter
from kubepromote.infrastructure.config import GitOpsConfig, PromoterConfig
from kubepromote.presentation.commands.operator_commands import (
    OperatorCommands,
    confirmation_of,
)


class InMemoryRepo:
    """Stands in for a PyGithub Repository holding one policy file per path."""

    def __init__(self, files):
        self.files = dict(files)
        self.commits = []

    def get_contents(self, path, ref):
        content = MagicMock()
        content.decoded_content = self.files[(path, ref)].encode("utf-8")
        content.sha = f"sha-{len(self.commits)}"
        return content

    def update_file(self, path, message, content, sha, branch):
        self.files[(path, branch)] = content
        self.commits.append((branch, message))


def policy(version):
    return f"spec:\n  policy:\n    semver:\n      range: '{version}'\n"


@pytest.fixture
def repo():
    return InMemoryRepo({
        ("clusters/kbot/qa/image-policy.yaml", "main"): policy("1.0.0"),
        ("clusters/kbot/prod/image-policy.yaml", "prod"): policy("0.9.0"),
    })


@pytest.fixture
def commands(cluster, history, notifier, repo):
    github = MagicMock()
    github.get_repo.return_value = repo
    gitops = GitHubAdapter(GitOpsConfig(owner="acme", repo="flux"), github=github)
    container = create_container(
        PromoterConfig(), cluster=cluster, gitops=gitops, history=history, notifier=notifier
    )
    container.observer.retry_delay = 0
    return OperatorCommands(container)


class TestPromotionFlow:
    @pytest.mark.asyncio
    async def test_promote_confirm_and_rollback(self, commands, cluster, history, notifier, repo, make_pod, make_event):
        cluster.deploy("dev", make_pod("web-d", "1.1.0"))
        cluster.deploy("qa", make_pod("web-q", "1.0.0"))
        cluster.events["qa"] = [
            make_event(EventKind.ADDED, "web-q2", "1.1.0"),
        ]
        history.append("qa", "1.0.0", "web")

        context = CommandContext(command="/promote qa web", initiator="alice")
        outcome = await commands.handle_text("/promote qa web", context)

        assert outcome.ok
        assert await confirmation_of(outcome) is WatchState.CONFIRMED
        assert "range: '1.1.0'" in repo.files[("clusters/kbot/qa/image-policy.yaml", "main")]
        assert repo.commits == [("main", "Promote web version 1.1.0 to qa")]
        assert [e.version for e in history.entries("qa", "web")] == ["1.1.0", "1.0.0"]

        # The cluster now reflects the promoted version.
        cluster.pods["qa"] = [make_pod("web-q2", "1.1.0")]
        cluster.events["qa"] = [make_event(EventKind.MODIFIED, "web-q3", "1.0.0")]

        context = CommandContext(command="/rollback qa web", initiator="alice")
        outcome = await commands.handle_text("/rollback qa web", context)

        assert outcome.ok
        assert await confirmation_of(outcome) is WatchState.CONFIRMED
        assert "range: '1.0.0'" in repo.files[("clusters/kbot/qa/image-policy.yaml", "main")]
        assert repo.commits[-1] == ("main", "Rollback web version 1.0.0 to qa")
        assert len(history.entries("qa", "web")) == 2

        assert notifier.failures == []
        assert len(notifier.successes) == 4

    @pytest.mark.asyncio
    async def test_prod_promotion_targets_prod_branch(self, commands, cluster, repo, make_pod):
        cluster.deploy("stage", make_pod("web-s", "1.0.0"))
        cluster.deploy("prod", make_pod("web-p", "0.9.0"))

        outcome = await commands.handle_text("/promote prod web", CommandContext("/promote prod web"))
        await confirmation_of(outcome)

        assert repo.commits == [("prod", "Promote web version 1.0.0 to prod")]

    @pytest.mark.asyncio
    async def test_concurrent_promotions_serialised(self, commands, cluster, history, make_pod):
        cluster.deploy("dev", make_pod("web-d", "1.1.0"))
        cluster.deploy("qa", make_pod("web-q", "1.0.0"))

        first, second = await asyncio.gather(
            commands.handle_text("/promote qa web", CommandContext("/promote qa web")),
            commands.handle_text("/promote qa web", CommandContext("/promote qa web")),
        )

        # The cluster has not caught up yet, so both decide 1.0.0 -> 1.1.0;
        # the second finds the file already pinned and makes no commit.
        results = [first.result, second.result]
        assert [r.committed for r in results] == [True, False]
        await commands.container.confirm_rollout.wait_all()
        assert len(history.entries("qa", "web")) == 2
