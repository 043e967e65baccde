"""Tests for ListWorkloads and DiffVersions."""

import pytest

from kubepromote.application.dtos.promotion_dtos import StageVersion, VersionDiff
from kubepromote.application.use_cases.inspect_pipeline import DiffVersions, ListWorkloads
from kubepromote.application.use_cases.observe_workloads import WorkloadObserver
from kubepromote.domain.errors import LabelNotFound, NamespaceNotAllowed
from kubepromote.domain.value_objects.workload_instance import Phase


class TestListWorkloads:
    @pytest.mark.asyncio
    async def test_report(self, cluster, make_pod):
        cluster.deploy(
            "dev",
            make_pod("web-1", "1.1"),
            make_pod("api-1", "3.0", label="api", phase=Phase.PENDING,
                     waiting_reason="CrashLoopBackOff"),
        )
        report = await ListWorkloads(WorkloadObserver(cluster, retry_delay=0)).execute("dev")

        rendered = report.render()
        assert rendered.startswith("Namespace: `dev`")
        assert "Pod: `web-1`, Version: `1.1`, Status: `Running`, Label: `web`" in rendered
        assert "Status: `CrashLoopBackOff`" in rendered

    @pytest.mark.asyncio
    async def test_status_failure_is_reported_per_pod(self, cluster, make_pod):
        cluster.deploy("dev", make_pod("web-1", "1.1"), make_pod("web-2", "1.1"))

        original = cluster.get_instance

        async def flaky_get_instance(name, namespace):
            if name == "web-2":
                raise RuntimeError("timeout")
            return await original(name, namespace)

        cluster.get_instance = flaky_get_instance
        report = await ListWorkloads(WorkloadObserver(cluster, retry_delay=0)).execute("dev")

        assert len(report.lines) == 2
        assert report.lines[1].render() == "Error: Failed to get status for pod web-2;"

    @pytest.mark.asyncio
    async def test_namespace_not_allowed(self, cluster):
        with pytest.raises(NamespaceNotAllowed):
            await ListWorkloads(WorkloadObserver(cluster)).execute("kube-system")


class TestDiffVersions:
    @pytest.mark.asyncio
    async def test_differences(self, cluster, make_pod):
        cluster.deploy("dev", make_pod("web-d", "1.2"))
        cluster.deploy("qa", make_pod("web-q", "1.1"))
        cluster.deploy("stage", make_pod("web-s", "1.1"))
        cluster.deploy("prod", make_pod("web-p", "1.0"))

        diff = await DiffVersions(WorkloadObserver(cluster, retry_delay=0)).execute("web")

        assert not diff.all_same_version
        assert [s.version for s in diff.stages] == ["1.2", "1.1", "1.1", "1.0"]
        assert "Namespace: `prod`, Version: `1.0`, Status: `Running`" in diff.render()

    @pytest.mark.asyncio
    async def test_same_everywhere(self, cluster, make_pod):
        for namespace in ("dev", "qa", "stage", "prod"):
            cluster.deploy(namespace, make_pod(f"web-{namespace}", "1.0"))

        diff = await DiffVersions(WorkloadObserver(cluster, retry_delay=0)).execute("web")

        assert diff.all_same_version
        assert "No promotion needed" in diff.render()

    @pytest.mark.asyncio
    async def test_only_running_pods_count(self, cluster, make_pod):
        cluster.deploy("dev", make_pod("web-d", "1.2", phase=Phase.PENDING), make_pod("web-d2", "1.1"))
        for namespace in ("qa", "stage", "prod"):
            cluster.deploy(namespace, make_pod(f"web-{namespace}", "1.1"))

        diff = await DiffVersions(WorkloadObserver(cluster, retry_delay=0)).execute("web")

        assert diff.stages[0].version == "1.1"
        assert diff.all_same_version

    @pytest.mark.asyncio
    async def test_label_nowhere(self, cluster, make_pod):
        for namespace in ("dev", "qa", "stage", "prod"):
            cluster.deploy(namespace, make_pod(f"api-{namespace}", "3.0", label="api"))

        with pytest.raises(LabelNotFound):
            await DiffVersions(WorkloadObserver(cluster, retry_delay=0)).execute("web")


class TestVersionDiff:
    def test_empty_versions_do_not_count_as_a_difference(self):
        diff = VersionDiff("web", (
            StageVersion("dev", "", "Running"),
            StageVersion("qa", "1.0", "Running"),
            StageVersion("prod", "1.0", "Running"),
        ))
        assert diff.all_same_version
        assert "No promotion needed" in diff.render()

    def test_empty_versions_are_not_rendered(self):
        diff = VersionDiff("web", (
            StageVersion("dev", "", "Running"),
            StageVersion("qa", "1.1", "Running"),
            StageVersion("prod", "1.0", "Running"),
        ))
        rendered = diff.render()
        assert rendered.startswith("Differences found")
        assert "`dev`" not in rendered
        assert rendered.splitlines()[1:] == [
            "Namespace: `qa`, Version: `1.1`, Status: `Running`",
            "Namespace: `prod`, Version: `1.0`, Status: `Running`",
        ]
