import asyncio
import os

from conftest import FakeRunner, requires_gxx, requires_java, touch
from execution import ArtifactError, ArtifactStore, ErrorKind, ExecutionResult, ExecutionService
from execution.languages import CppExecutor, JavaExecutor, PythonExecutor


def execute(service, language, code, input_data=""):
    return asyncio.run(service.execute(language, code, input_data))


def python_service(store, python_bin, **kwargs):
    return ExecutionService(store=store, executors={"python": PythonExecutor(python_bin)}, **kwargs)


def test_oversized_code_is_rejected_before_writing(store):
    runner = FakeRunner()
    service = ExecutionService(store=store, runner=runner, max_file_size=10)

    result = execute(service, "python", "x" * 11)

    assert result.errorKind == ErrorKind.SIZE_LIMIT_EXCEEDED
    assert runner.calls == []
    assert store.live_count() == 0


def test_size_limit_counts_encoded_bytes(store):
    service = ExecutionService(store=store, runner=FakeRunner(), max_file_size=10)

    result = execute(service, "python", "é" * 6)

    assert result.errorKind == ErrorKind.SIZE_LIMIT_EXCEEDED


def test_default_size_limit_message(store):
    service = ExecutionService(store=store, runner=FakeRunner())

    result = execute(service, "python", "#" * (1024 * 1024 + 1))

    assert result.errorMessage == "File size exceeds 1MB limit"


def test_unsupported_language_has_no_side_effects(store):
    for i in range(5):
        touch(store.path_for(f"old_{i}.py"))
    runner = FakeRunner()
    service = ExecutionService(store=store, runner=runner)

    result = execute(service, "cobol", "DISPLAY 'HI'.")

    assert result.errorKind == ErrorKind.UNSUPPORTED_LANGUAGE
    assert result.errorMessage == "Unsupported language"
    assert runner.calls == []
    assert store.live_count() == 5


def test_artifact_failure_becomes_internal_error(tmp_path):
    class BrokenStore(ArtifactStore):
        def write(self, name, data, role=None):
            raise ArtifactError("disk full")

    service = ExecutionService(store=BrokenStore(str(tmp_path)), runner=FakeRunner())

    result = execute(service, "python", "print(1)")

    assert result.errorKind == ErrorKind.INTERNAL_ERROR
    assert "disk full" not in result.errorMessage


def test_artifact_paths_are_scrubbed_from_messages(store):
    message = os.path.join(store.directory, "code_1.cpp") + ":1:1: error: expected ';'"
    runner = FakeRunner(results=[ExecutionResult.failure(ErrorKind.COMPILE_FAILED, message)])
    service = ExecutionService(store=store, runner=runner)

    result = execute(service, "cpp", "int main( {}")

    assert result.errorMessage == "code_1.cpp:1:1: error: expected ';'"


def test_live_files_stay_within_bound_during_execution(store):
    for i in range(5):
        touch(store.path_for(f"old_{i}.py"), when_ns=(1_700_000_000 + i) * 10**9)
    seen = []
    runner = FakeRunner(side_effect=lambda call: seen.append(len(call["files"])))
    service = ExecutionService(store=store, runner=runner)

    execute(service, "cpp", "int main() {}")

    assert seen and max(seen) <= 5
    assert store.live_count() <= 5


def test_echo_input(store, python_bin):
    result = execute(python_service(store, python_bin), "python", "print(input())", "hi")

    assert result.success
    assert result.output == "hi\n"
    assert result.to_response() == {"success": True, "output": "hi\n"}
    assert store.live_count() == 0


def test_runtime_error_reports_stderr(store, python_bin):
    result = execute(python_service(store, python_bin), "python", "import sys; sys.exit('bad input')")

    assert result.errorKind == ErrorKind.RUNTIME_FAILED
    assert result.errorMessage.strip() == "bad input"
    assert result.to_response() == {"success": False, "error": result.errorMessage}


def test_infinite_loop_times_out_and_cleans_up(store, python_bin):
    service = python_service(store, python_bin, timeout_ms=500)

    result = execute(service, "python", "while True: pass")

    assert result.errorKind == ErrorKind.TIMEOUT
    assert store.live_count() == 0


def test_six_sequential_submissions_never_exceed_bound(store, python_bin):
    service = python_service(store, python_bin)

    for i in range(6):
        result = execute(service, "python", f"print({i})")
        assert result.output == f"{i}\n"
        assert store.live_count() <= 5


def test_concurrent_submissions_each_get_their_own_output(store, python_bin):
    service = python_service(store, python_bin)

    async def many():
        return await asyncio.gather(*[
            service.execute("python", "print(input() * 2)", str(i)) for i in range(4)
        ])

    results = asyncio.run(many())

    assert [r.output for r in results] == [f"{i}{i}\n" for i in range(4)]
    assert store.live_count() == 0


@requires_gxx
def test_cpp_syntax_error_is_compile_failure(store):
    service = ExecutionService(store=store, executors={"cpp": CppExecutor()})

    result = execute(service, "cpp", "int main() { return 0 }")

    assert result.errorKind == ErrorKind.COMPILE_FAILED
    assert result.errorMessage
    assert store.directory not in result.errorMessage
    assert store.live_count() == 0


@requires_gxx
def test_cpp_program_reads_input(store):
    service = ExecutionService(store=store, executors={"cpp": CppExecutor()})
    code = "#include <iostream>\nint main() { int n; std::cin >> n; std::cout << n * 2 << std::endl; }\n"

    result = execute(service, "cpp", code, "21")

    assert result.success
    assert result.output == "42\n"
    assert store.live_count() == 0


@requires_java
def test_java_program_runs_from_shared_classpath(store):
    service = ExecutionService(store=store, executors={"java": JavaExecutor()})
    code = (
        "import java.util.Scanner;\n"
        "public class Main {\n"
        "  public static void main(String[] args) {\n"
        "    System.out.println(\"hello \" + new Scanner(System.in).nextLine());\n"
        "  }\n"
        "}\n"
    )

    result = execute(service, "java", code, "world")

    assert result.output == "hello world\n"
    assert store.live_count() == 0
