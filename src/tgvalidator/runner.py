# Copyright 2025 Multikernel Technologies, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Test matrix runner.

A run is planned, then executed as a task graph:

1. Plan: resolve targets, load every feature and peripheral-class template.
   Nothing is built until the whole corpus has loaded.
2. Execute on an executor:
   - one build per (target, feature test);
   - one probe build per (target, class, candidate peripheral);
   - when all probes of a (target, class) pair are done, that pair's
     instances are known and one build per (test, instance) is scheduled.
3. Merge per-cell results in matrix order into a ReportAggregator.

The first infrastructure error anywhere cancels outstanding cells and is
raised as RunError. Results already collected are dropped.

With ``jobs == 1`` cells run inline on a SerialExecutor, in submission
order; otherwise a ThreadPoolExecutor runs them concurrently. The graph and
its ordering guarantees are the same either way.
"""

import logging
import threading
from concurrent.futures import CancelledError, Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .build import BuildDriver
from .detector import PeripheralDetector
from .exceptions import RunError, ToolchainError, ValidatorError
from .models import FeatureResult, PeripheralResult, Report, RunConfig
from .report import ReportAggregator
from .templates import ProgramTemplate, TemplateLoader
from .toolchain import Compiler

log = logging.getLogger(__name__)

Echo = Callable[[str], None]


class SerialExecutor(Executor):
    """Executor that runs each task in the caller's thread at submit time."""

    def __init__(self):
        self._shutdown = False

    def submit(self, fn, *args, **kwargs) -> Future:
        if self._shutdown:
            raise RuntimeError("cannot schedule new tasks after shutdown")
        future = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future

    def shutdown(self, wait=True, *, cancel_futures=False):
        self._shutdown = True


def make_executor(jobs: int) -> Executor:
    if jobs <= 1:
        return SerialExecutor()
    return ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="tgvalidator")


@dataclass(frozen=True)
class Cell:
    """Position of one build in the test matrix."""
    target: str
    pclass: Optional[str] = None
    test: Optional[str] = None
    peripheral: Optional[str] = None

    def describe(self) -> str:
        if self.test is None:
            return f"unable to detect peripherals of class {self.pclass} for target {self.target}"
        if self.pclass is None:
            return f"unable to run test '{self.test}' for target {self.target}"
        return (f"unable to run test '{self.pclass}.{self.test}' for target {self.target} "
                f"on peripheral {self.peripheral}")


@dataclass
class RunPlan:
    """Everything a run needs, loaded before the first build."""
    targets: List[str]
    features: Dict[str, ProgramTemplate] = field(default_factory=dict)
    classes: Dict[str, Dict[str, ProgramTemplate]] = field(default_factory=dict)


class TaskGraph:
    """
    Submits matrix cells to an executor and fails fast.

    The first cell that raises is remembered; later submissions are refused
    and queued cells are cancelled.
    """

    def __init__(self, executor: Executor):
        self.executor = executor
        self._lock = threading.Lock()
        self._pending: List[Future] = []
        self._failure: Optional[Tuple[Cell, Exception]] = None

    def submit(self, cell: Cell, fn, *args) -> Future:
        self.raise_if_failed()
        future = self.executor.submit(self._call, cell, fn, *args)
        with self._lock:
            self._pending.append(future)
            failed = self._failure is not None
        if failed:
            future.cancel()
        return future

    def result(self, future: Future):
        """Wait for a cell; raise the run's first failure if there is one."""
        try:
            return future.result()
        except CancelledError as e:
            error = e
        except Exception as e:
            error = e
        self.raise_if_failed()
        raise error

    def raise_if_failed(self) -> None:
        with self._lock:
            failure = self._failure
        if failure is None:
            return
        cell, error = failure
        if isinstance(error, ValidatorError):
            raise RunError(f"{cell.describe()}: {error}", target=cell.target,
                           pclass=cell.pclass, test=cell.test) from error
        raise error

    def _call(self, cell: Cell, fn, *args):
        try:
            return fn(*args)
        except Exception as e:
            self._fail(cell, e)
            raise

    def _fail(self, cell: Cell, error: Exception) -> None:
        with self._lock:
            if self._failure is None:
                self._failure = (cell, error)
            pending = list(self._pending)
        for future in pending:
            future.cancel()


class MatrixRunner:
    """
    Runs feature and peripheral tests across targets.

    Args:
        compiler: Compiler used for target discovery and every build
        loader: Corpus loader
        config: Run configuration
        echo: Progress callback, e.g. ``click.echo``
    """

    def __init__(self, compiler: Compiler, loader: TemplateLoader,
                 config: Optional[RunConfig] = None, echo: Optional[Echo] = None):
        self.compiler = compiler
        self.loader = loader
        self.config = config or RunConfig()
        self.driver = BuildDriver(compiler)
        self.detector = PeripheralDetector(self.driver, self.config.max_instance_index)
        self.echo = echo or (lambda message: None)

    def resolve_targets(self) -> List[str]:
        """Explicit targets if configured, otherwise ask the toolchain."""
        if self.config.targets is not None:
            return list(self.config.targets)
        try:
            return self.compiler.list_targets()
        except ToolchainError as e:
            raise RunError(f"failed to get list of targets: {e}") from e

    def plan(self) -> RunPlan:
        """
        Resolve targets and load every template the run needs.

        Raises:
            RunError: If targets cannot be listed or the corpus cannot be loaded
        """
        # Repeated names would collapse in the per-pair maps; keep first occurrence
        targets = list(dict.fromkeys(self.resolve_targets()))
        self.echo(f"targets: {','.join(targets)}")
        plan = RunPlan(targets=targets)

        if self.config.run_features:
            try:
                plan.features = self.loader.load_features()
            except ValidatorError as e:
                raise RunError(f"failed to load feature tests: {e}") from e

        if self.config.peripheral_classes is not None:
            pclasses = list(dict.fromkeys(self.config.peripheral_classes))
        else:
            try:
                pclasses = self.loader.peripheral_classes()
            except ValidatorError as e:
                raise RunError(
                    f"failed to enumerate peripherals directory looking for tests: {e}"
                ) from e
        self.echo(f"peripheral classes: {','.join(pclasses)}")

        for pclass in pclasses:
            try:
                plan.classes[pclass] = self.loader.load_class(pclass)
            except ValidatorError as e:
                raise RunError(f"failed to load tests for {pclass}: {e}", pclass=pclass) from e

        return plan

    def run(self) -> Report:
        return self.execute(self.plan())

    def execute(self, plan: RunPlan) -> Report:
        """Build every cell of a plan and return the aggregated report."""
        executor = make_executor(self.config.jobs)
        graph = TaskGraph(executor)
        try:
            return self._execute(plan, graph)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _execute(self, plan: RunPlan, graph: TaskGraph) -> Report:
        """
        Schedule and merge every cell of a plan.

        Detection is PeripheralDetector.detect split into one cell per
        candidate: the same candidates, the same probe, and the instances
        are the candidates whose probe passed, in index order.
        """
        feature_cells = []
        for target in plan.targets:
            for name, template in plan.features.items():
                cell = Cell(target=target, test=name)
                feature_cells.append((cell, graph.submit(cell, self.driver.build, template, target)))

        probes: Dict[Tuple[str, str], List[Tuple[str, Future]]] = {}
        for target in plan.targets:
            for pclass in plan.classes:
                pair = []
                for name in self.detector.candidates(pclass):
                    cell = Cell(target=target, pclass=pclass, peripheral=name)
                    pair.append((name, graph.submit(cell, self.detector.probe, target, name)))
                probes[(target, pclass)] = pair

        test_cells = []
        for (target, pclass), pair in probes.items():
            peripherals = [name for name, future in pair if graph.result(future)]
            self.echo(f"detected {target} {pclass} peripherals: {' '.join(peripherals) or '(none)'}")
            for name, template in plan.classes[pclass].items():
                for peripheral in peripherals:
                    cell = Cell(target=target, pclass=pclass, test=name, peripheral=peripheral)
                    test_cells.append(
                        (cell, graph.submit(cell, self.driver.build, template, target, peripheral))
                    )

        aggregator = ReportAggregator()
        aggregator.extend(self._results(graph, feature_cells + test_cells))
        report = aggregator.finalize()
        for target in plan.targets:
            tested = [r.feature for r in report.features if r.target == target]
            if tested:
                self.echo(f"tested {target} features: {' '.join(tested)}")
        log.debug("run complete: %d feature results, %d peripheral results",
                  len(report.features), len(report.peripherals))
        return report

    @staticmethod
    def _results(graph: TaskGraph, cells: List[Tuple[Cell, Future]]):
        for cell, future in cells:
            outcome = graph.result(future)
            if cell.pclass is None:
                yield FeatureResult(
                    target=cell.target,
                    feature=cell.test,
                    passed=outcome.passed,
                    output=outcome.output,
                )
            else:
                yield PeripheralResult(
                    target=cell.target,
                    pclass=cell.pclass,
                    feature=cell.test,
                    peripheral=cell.peripheral,
                    passed=outcome.passed,
                    output=outcome.output,
                )
