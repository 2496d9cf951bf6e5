import importlib.util
import os
import re

from deployer.utils import log
from deployer.utils.errors import TaskError

TASK_FILENAME = re.compile(r"(\d+).*\.py$")


class TaskRunner:
    """
    Runs numbered task scripts (`0001-PositionManager.py`, ...) in numeric
    order. Each script exposes `run(deployment)`.

    Task scripts are expected to declare desired state (deploy-or-reuse and
    reconciliation edges), so running one again over a converged network
    sends nothing.
    """

    def __init__(self, tasks_dir):
        self.tasks_dir = tasks_dir

    def run(self, deployment, start=None, end=None, single=False):
        """
        Runs every task numbered from `start` to `end` (inclusive, both
        optional), or only the first of them when `single` is set.
        Returns the numbers of the tasks that ran.
        """
        completed = []
        for filename, number in self._filtered_task_filenames(start, end):
            log.h1(f"Running task {number} ({os.path.basename(filename)})...")
            try:
                run_task = self._load(filename, number)
                run_task(deployment)
            except TaskError:
                raise
            except Exception as exception:
                log.error(f"Task {number} failed: {exception}")
                raise TaskError(number) from exception

            completed.append(number)
            if single:
                break

        deployment.end()
        return completed

    def _load(self, filename, number):
        # imports a task script, errors raised at module level count as a
        # failure of that task
        spec = importlib.util.spec_from_file_location(f"task_{number}", filename)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        if not hasattr(module, "run"):
            raise TaskError(number, f"Task script {filename} has no `run(deployment)` function")
        return module.run

    def _filtered_task_filenames(self, start=None, end=None):
        # Get a list of `(filename, number)` tuples for the scripts numbered
        # between `start` and `end`, sorted numerically.
        # A start or end of `None` or '0' leaves that side open.
        if not os.path.isdir(self.tasks_dir):
            log.error(f"No task directory at {self.tasks_dir}")
            return []

        numbered = []
        for file in os.listdir(self.tasks_dir):
            match = TASK_FILENAME.fullmatch(file)
            if match:
                numbered.append((os.path.join(self.tasks_dir, file), match.group(1)))

        # sort order of `os.listdir` is not guaranteed
        numbered = sorted(numbered, key=lambda x: int(x[1]))

        start_int = int(start) if start and str(start) != "0" else None
        end_int = int(end) if end and str(end) != "0" else None

        tasks = []
        for filename, number in numbered:
            if end_int is not None and int(number) > end_int:
                break
            if start_int is None or int(number) >= start_int:
                tasks.append((filename, number))

        return tasks
