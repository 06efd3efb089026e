"""Tests for the ``docker`` domain: parsers, formatters and guards."""

from __future__ import annotations

import json

import pytest

from clishape.core.models import RawInvocationResult
from clishape.domains.docker import formatters, guards, parsers
from clishape.domains.docker.models import (
    BuildErrorType,
    DockerErrorType,
    PortBinding,
    PullErrorType,
    PullStatus,
    RunErrorType,
)
from clishape.domains.registry import get_action
from clishape.exceptions import (
    FlagInjectionError,
    GuardError,
    InvalidPortMappingError,
    UnsafeVolumeMountError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ps_line(
    *,
    id_: str = "3f4e5d6c7b8a9f0e1d2c3b4a",
    name: str = "web",
    image: str = "nginx:latest",
    status: str = "Up 2 hours",
    state: str = "running",
    ports: str = "",
) -> str:
    return json.dumps({
        "ID": id_,
        "Names": name,
        "Image": image,
        "Status": status,
        "State": state,
        "Ports": ports,
        "RunningFor": "2 hours ago",
    })


# ---------------------------------------------------------------------------
# ps
# ---------------------------------------------------------------------------

class TestParsePs:
    def test_two_published_ports_in_order(self) -> None:
        line = _ps_line(ports="0.0.0.0:8080->80/tcp, 0.0.0.0:443->443/tcp")
        result = parsers.parse_ps(line, "", 0)

        assert result.success is True
        assert result.containers[0].ports == (
            PortBinding(container_port=80, protocol="tcp", host_port=8080, host_ip="0.0.0.0"),
            PortBinding(container_port=443, protocol="tcp", host_port=443, host_ip="0.0.0.0"),
        )

    def test_counts(self) -> None:
        stdout = "\n".join([
            _ps_line(name="web"),
            _ps_line(name="db", status="Exited (0) 3 days ago", state="exited"),
            _ps_line(name="cache", status="Up 1 minute", state=""),
        ])
        result = parsers.parse_ps(stdout, "", 0)
        assert result.total == 3
        assert result.running == 2
        assert result.stopped == 1
        assert [c.name for c in result.containers] == ["web", "db", "cache"]

    def test_table_fallback(self) -> None:
        stdout = (
            "CONTAINER ID   IMAGE    COMMAND   CREATED       STATUS                   PORTS     NAMES\n"
            "a1b2c3d4e5f6   redis    \"redis\"   3 days ago    Exited (0) 2 days ago              cache\n"
        )
        result = parsers.parse_ps(stdout, "", 0)
        assert result.total == 1
        container = result.containers[0]
        assert container.id == "a1b2c3d4e5f6"
        assert container.name == "cache"
        assert container.state == "exited"
        assert result.stopped == 1

    def test_exposed_and_ipv6_ports(self) -> None:
        assert parsers.parse_ports("53/udp, :::8080->80/tcp") == (
            PortBinding(container_port=53, protocol="udp"),
            PortBinding(container_port=80, protocol="tcp", host_port=8080, host_ip="::"),
        )

    def test_published_port_without_host_address(self) -> None:
        assert parsers.parse_ports("443->443/tcp") == (
            PortBinding(container_port=443, protocol="tcp", host_port=443, host_ip=None),
        )

    def test_port_range_yields_one_binding_per_port(self) -> None:
        assert parsers.parse_ports("0.0.0.0:8000-8001->8000-8001/tcp, 9000-9001/udp") == (
            PortBinding(container_port=8000, protocol="tcp", host_port=8000, host_ip="0.0.0.0"),
            PortBinding(container_port=8001, protocol="tcp", host_port=8001, host_ip="0.0.0.0"),
            PortBinding(container_port=9000, protocol="udp"),
            PortBinding(container_port=9001, protocol="udp"),
        )

    def test_empty_output(self) -> None:
        result = parsers.parse_ps("", "", 0)
        assert result.success is True
        assert result.total == 0

    def test_daemon_unavailable(self) -> None:
        result = parsers.parse_ps(
            "", "Cannot connect to the Docker daemon at unix:///var/run/docker.sock. Is the docker daemon running?", 1,
        )
        assert result.success is False
        assert result.error_type is DockerErrorType.DAEMON_UNAVAILABLE
        assert result.error_message is not None

    def test_compact_keeps_scalars_and_shortens_ids(self) -> None:
        stdout = "\n".join(_ps_line(name=f"c{i}") for i in range(15))
        full = parsers.parse_ps(stdout, "", 0)
        compact = formatters.compact_ps(full)

        assert compact.total == full.total == 15
        assert compact.running == full.running
        assert compact.stopped == full.stopped
        assert len(compact.containers) == 10
        assert compact.containers[0].id == "3f4e5d6c7b8a"
        assert full.containers[0].id == "3f4e5d6c7b8a9f0e1d2c3b4a"
        assert "... and 5 more" in formatters.format_ps_compact(compact)
        assert formatters.compact_ps(full) == compact


# ---------------------------------------------------------------------------
# images
# ---------------------------------------------------------------------------

class TestParseImages:
    def test_json_lines(self) -> None:
        stdout = json.dumps({
            "ID": "sha256:" + "b" * 64,
            "Repository": "nginx",
            "Tag": "1.25",
            "Size": "187MB",
            "CreatedSince": "2 weeks ago",
        })
        result = parsers.parse_images(stdout, "", 0)
        image = result.images[0]
        assert image.id == "b" * 12
        assert image.size_bytes == 187_000_000
        assert (image.repository, image.tag) == ("nginx", "1.25")

    def test_table(self) -> None:
        stdout = (
            "REPOSITORY   TAG       IMAGE ID       CREATED        SIZE\n"
            "<none>       <none>    0123456789ab   5 months ago   1.2GB\n"
        )
        result = parsers.parse_images(stdout, "", 0)
        assert result.total == 1
        assert result.images[0].size_bytes == 1_200_000_000
        assert result.images[0].repository == "<none>"


# ---------------------------------------------------------------------------
# build
# ---------------------------------------------------------------------------

class TestParseBuild:
    BUILDKIT = (
        "#0 building with \"default\" instance using docker driver\n"
        "#1 [internal] load build definition from Dockerfile\n"
        "#1 DONE 0.0s\n"
        "#2 [1/3] FROM docker.io/library/python:3.12\n"
        "#3 [2/3] COPY . /app\n"
        "#3 CACHED\n"
        "#4 [3/3] RUN pip install .\n"
        "#4 DONE 4.1s\n"
        "#5 exporting to image\n"
        "#5 writing image sha256:" + "c" * 64 + " done\n"
        "[+] Building 12.5s (9/9) FINISHED\n"
    )

    def test_buildkit_success(self) -> None:
        result = parsers.parse_build("", self.BUILDKIT, 0)
        assert result.success is True
        assert result.image_id == "c" * 12
        assert result.steps == 6
        assert result.cached_steps == 1
        assert result.duration_seconds == pytest.approx(12.5)
        assert result.errors == ()

    def test_classic_builder(self) -> None:
        stdout = (
            "Step 1/2 : FROM alpine\n"
            " ---> Using cache\n"
            "Step 2/2 : RUN echo hi\n"
            "Successfully built 0a1b2c3d4e5f\n"
        )
        result = parsers.parse_build(stdout, "", 0)
        assert result.image_id == "0a1b2c3d4e5f"
        assert result.steps == 2
        assert result.cached_steps == 1

    def test_failed_step(self) -> None:
        stderr = (
            "#4 [3/3] RUN make\n"
            "#4 ERROR: process \"/bin/sh -c make\" did not complete successfully: exit code: 2\n"
            "ERROR: failed to solve: process \"/bin/sh -c make\" did not complete successfully\n"
        )
        result = parsers.parse_build("", stderr, 1)
        assert result.success is False
        assert result.error_type is BuildErrorType.STEP_FAILED
        assert len(result.errors) == 2
        assert result.error_message == result.errors[0]

    def test_missing_dockerfile(self) -> None:
        result = parsers.parse_build("", "ERROR: failed to read dockerfile: open Dockerfile: no such file", 1)
        assert result.error_type is BuildErrorType.DOCKERFILE_NOT_FOUND

    def test_caller_duration_wins(self) -> None:
        result = parsers.parse_build("", self.BUILDKIT, 0, duration_seconds=3.0)
        assert result.duration_seconds == 3.0


# ---------------------------------------------------------------------------
# logs
# ---------------------------------------------------------------------------

class TestParseLogs:
    def test_limit_truncates(self) -> None:
        stdout = "\n".join(f"line {i}" for i in range(20))
        result = parsers.parse_logs(stdout, "", 0, container="web", limit=5)
        assert result.lines == tuple(f"line {i}" for i in range(5))
        assert result.total_lines == 20
        assert result.is_truncated is True

    def test_both_streams_kept(self) -> None:
        result = parsers.parse_logs("out\n", "err\n", 0, container="web")
        assert result.lines == ("out", "err")
        assert result.is_truncated is False

    def test_missing_container(self) -> None:
        result = parsers.parse_logs("", "Error response from daemon: No such container: ghost", 1, container="ghost")
        assert result.error_type is DockerErrorType.NOT_FOUND

    def test_compact_keeps_edges(self) -> None:
        stdout = "\n".join(f"line {i}" for i in range(30))
        compact = formatters.compact_logs(parsers.parse_logs(stdout, "", 0, container="web"))
        assert compact.head == tuple(f"line {i}" for i in range(5))
        assert compact.tail == tuple(f"line {i}" for i in range(25, 30))
        assert compact.total_lines == 30


# ---------------------------------------------------------------------------
# pull
# ---------------------------------------------------------------------------

class TestParsePull:
    @pytest.mark.parametrize(
        ("reference", "expected"),
        [
            ("nginx", ("nginx", "latest")),
            ("nginx:1.25", ("nginx", "1.25")),
            ("localhost:5000/app", ("localhost:5000/app", "latest")),
            ("localhost:5000/app:v2", ("localhost:5000/app", "v2")),
            ("ghcr.io/o/r@sha256:abc", ("ghcr.io/o/r", "latest")),
        ],
    )
    def test_reference_split(self, reference: str, expected: tuple[str, str]) -> None:
        assert parsers.split_image_reference(reference) == expected

    def test_pulled_with_digest(self) -> None:
        stdout = (
            "1.25: Pulling from library/nginx\n"
            "Digest: sha256:" + "d" * 64 + "\n"
            "Status: Downloaded newer image for nginx:1.25\n"
        )
        result = parsers.parse_pull(stdout, "", 0, image="nginx:1.25")
        assert result.status is PullStatus.PULLED
        assert result.digest == "sha256:" + "d" * 64

    def test_up_to_date(self) -> None:
        result = parsers.parse_pull("Status: Image is up to date for nginx:latest", "", 0, image="nginx")
        assert result.status is PullStatus.UP_TO_DATE

    @pytest.mark.parametrize(
        ("stderr", "kind"),
        [
            ("toomanyrequests: You have reached your pull rate limit.", PullErrorType.RATE_LIMIT),
            ("unauthorized: authentication required", PullErrorType.AUTH),
            ("manifest unknown: manifest unknown", PullErrorType.NOT_FOUND),
            ("dial tcp: lookup registry-1.docker.io: i/o timeout", PullErrorType.NETWORK_TIMEOUT),
            ("something else", PullErrorType.UNKNOWN),
        ],
    )
    def test_error_kinds(self, stderr: str, kind: PullErrorType) -> None:
        result = parsers.parse_pull("", stderr, 1, image="nginx")
        assert result.success is False
        assert result.status is PullStatus.ERROR
        assert result.error_type is kind


# ---------------------------------------------------------------------------
# Actions and timeouts
# ---------------------------------------------------------------------------

class TestDockerActions:
    def test_timed_out_run_folds_into_failure(self) -> None:
        action = get_action("docker", "ps")
        result = action.parse(RawInvocationResult(stdout="", stderr="", exit_code=0, timed_out=True))
        assert result.success is False
        assert result.error_type is DockerErrorType.TIMEOUT

    def test_logs_context(self) -> None:
        action = get_action("docker", "logs")
        raw = RawInvocationResult(stdout="a\nb\nc\n", stderr="", exit_code=0)
        result = action.parse(raw, {"container": "web", "limit": "2"})
        assert result.container == "web"
        assert result.lines == ("a", "b")

    def test_logs_argv(self) -> None:
        action = get_action("docker", "logs")
        assert action.argv(["api"]) == ["logs", "api"]
        assert action.argv([], {"container": "api", "tail": "20"}) == ["logs", "--tail", "20", "api"]
        with pytest.raises(FlagInjectionError):
            action.argv(["--since=1h"])
        with pytest.raises(GuardError):
            action.argv([])

    def test_pull_validates_image(self) -> None:
        action = get_action("docker", "pull")
        assert action.argv(["nginx:1.25"]) == ["pull", "nginx:1.25"]
        with pytest.raises(FlagInjectionError):
            action.argv([], {"image": "--all-tags"})

    def test_ps_takes_no_operands(self) -> None:
        action = get_action("docker", "ps")
        assert action.argv() == ["ps", "-a", "--format", "json"]
        assert action.argv([], {"all": "false"}) == ["ps", "--format", "json"]
        with pytest.raises(GuardError):
            action.argv(["web"])

    def test_run_argv_from_context(self) -> None:
        action = get_action("docker", "run")
        argv = action.argv(
            ["alpine:3.20", "echo", "hello"],
            {"name": "web", "ports": "8080:80, 8443:443", "volumes": "./site:/srv", "env": "MODE=prod"},
        )
        assert argv == [
            "run", "-d", "--name", "web",
            "-p", "8080:80", "-p", "8443:443",
            "-v", "./site:/srv",
            "-e", "MODE=prod",
            "alpine:3.20", "echo", "hello",
        ]

    def test_run_command_cannot_carry_flags(self) -> None:
        with pytest.raises(FlagInjectionError):
            get_action("docker", "run").argv(["alpine", "sh", "-c", "id"])

    @pytest.mark.parametrize(
        ("context", "error"),
        [
            ({"ports": "999999:80"}, InvalidPortMappingError),
            ({"volumes": "/etc:/host-etc"}, UnsafeVolumeMountError),
            ({"env": "NOVALUE"}, GuardError),
            ({"name": "--privileged"}, FlagInjectionError),
            ({"detach": "sometimes"}, GuardError),
        ],
    )
    def test_run_screens_options(self, context: dict[str, str], error: type[GuardError]) -> None:
        with pytest.raises(error):
            get_action("docker", "run").argv(["nginx"], context)

    def test_run_requires_image(self) -> None:
        with pytest.raises(GuardError, match="Missing image"):
            get_action("docker", "run").argv([])


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------

class TestParseRun:
    CONTAINER_ID = "4f" * 32

    def test_detached_run_reports_container_id(self) -> None:
        result = parsers.parse_run(f"{self.CONTAINER_ID}\n", "", 0, image="nginx", name="web")
        assert result.success is True
        assert result.detached is True
        assert result.container_id == self.CONTAINER_ID
        assert result.output == ()
        assert formatters.format_run(result).startswith("Container 4f4f4f4f4f4f (web) started from nginx [detached]")

    def test_pull_noise_before_id(self) -> None:
        stdout = f"latest: Pulling from library/nginx\nStatus: Downloaded newer image\n{self.CONTAINER_ID}\n"
        result = parsers.parse_run(stdout, "Unable to find image 'nginx:latest' locally\n", 0, image="nginx")
        assert result.container_id == self.CONTAINER_ID

    def test_attached_run_keeps_output(self) -> None:
        result = parsers.parse_run("hello\n\nworld\n", "", 0, image="alpine", detached=False)
        assert result.container_id is None
        assert result.output == ("hello", "world")

    @pytest.mark.parametrize(
        ("stderr", "exit_code", "kind"),
        [
            ("docker: Error response from daemon: pull access denied for nope, repository does not exist.", 125, RunErrorType.IMAGE_NOT_FOUND),
            ('docker: Error response from daemon: Conflict. The container name "/web" is already in use by container "abc".', 125, RunErrorType.CONFLICT),
            ("docker: Cannot connect to the Docker daemon at unix:///var/run/docker.sock. Is the docker daemon running?", 125, RunErrorType.DAEMON_UNAVAILABLE),
            ("", 3, RunErrorType.COMMAND_FAILED),
            ("something odd", 125, RunErrorType.UNKNOWN),
        ],
    )
    def test_failures(self, stderr: str, exit_code: int, kind: RunErrorType) -> None:
        result = parsers.parse_run("", stderr, exit_code, image="nope", detached=False)
        assert result.success is False
        assert result.exit_code == exit_code
        assert result.error_type is kind

    def test_compact_caps_output(self) -> None:
        stdout = "\n".join(f"line {i}" for i in range(25))
        full = parsers.parse_run(stdout, "", 0, image="alpine", detached=False)
        compact = formatters.compact_run(full)
        assert compact.total_output_lines == 25
        assert len(compact.output) == 10
        assert "... and 15 more lines" in formatters.format_run_compact(compact)

    def test_action_reads_detach_from_context(self) -> None:
        action = get_action("docker", "run")
        raw = RawInvocationResult(stdout="hi\n", stderr="", exit_code=0)
        result = action.parse(raw, {"image": "alpine", "detach": "false"})
        assert result.detached is False
        assert result.output == ("hi",)


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

class TestDockerGuards:
    def test_build_images_args(self) -> None:
        assert guards.build_images_args() == ["images", "--format", "json"]
        assert guards.build_images_args("nginx") == ["images", "--format", "json", "nginx"]
        with pytest.raises(FlagInjectionError):
            guards.build_images_args("--all")

    def test_build_run_args(self) -> None:
        args = guards.build_run_args(
            "nginx:latest",
            name="web",
            ports=["8080:80"],
            volumes=["./site:/usr/share/nginx/html"],
            env={"MODE": "prod"},
        )
        assert args == [
            "run", "-d", "--name", "web", "-p", "8080:80",
            "-v", "./site:/usr/share/nginx/html", "-e", "MODE=prod", "nginx:latest",
        ]

    def test_run_rejects_privileged_image(self) -> None:
        with pytest.raises(FlagInjectionError):
            guards.build_run_args("--privileged")

    def test_run_rejects_bad_port(self) -> None:
        with pytest.raises(InvalidPortMappingError):
            guards.build_run_args("nginx", ports=["999999:80"])

    def test_run_rejects_socket_mount(self) -> None:
        with pytest.raises(UnsafeVolumeMountError):
            guards.build_run_args("nginx", volumes=["/var/run/docker.sock:/var/run/docker.sock"])

    @pytest.mark.parametrize("key", ["-e", "A=B", " "])
    def test_env_key_rejected(self, key: str) -> None:
        with pytest.raises(FlagInjectionError):
            guards.validate_env_key(key)

    def test_small_builders(self) -> None:
        assert guards.build_ps_args() == ["ps", "-a", "--format", "json"]
        assert guards.build_logs_args("web", tail=50) == ["logs", "--tail", "50", "web"]
        assert guards.build_pull_args("nginx", platform="linux/amd64") == [
            "pull", "--platform", "linux/amd64", "nginx",
        ]
        assert guards.build_build_args(".", tag="app:dev") == ["build", "-t", "app:dev", "."]
