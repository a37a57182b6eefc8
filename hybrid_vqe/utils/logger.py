import json
import os
import tempfile
from pathlib import Path

import mlflow  # type: ignore
from matplotlib.figure import Figure
from mlflow.exceptions import MlflowException
from mlflow.tracking import MlflowClient
from typing_extensions import Any, Self

RUN_DIR = os.environ.get("HYBRID_VQE_RUN_DIR", "./runs/")
EXPERIMENT_NAME = "hybrid_vqe"


def tracking_uri(run_dir: str = RUN_DIR) -> str:
    """
    The mlflow tracking store of a run directory, a sqlite database inside it.
    """

    return f"sqlite:///{os.path.abspath(os.path.join(run_dir, 'mlflow.db'))}"


mlflow.set_tracking_uri(tracking_uri())


def make_client(run_dir: str = RUN_DIR) -> MlflowClient:
    """
    Creates an mlflow client for the run directory, creating the directory if it is missing.
    """

    os.makedirs(run_dir, exist_ok=True)

    return MlflowClient(tracking_uri=tracking_uri(run_dir))


def get_experiment_id(client: MlflowClient, run_dir: str = RUN_DIR) -> str:
    """
    Returns the id of the experiment holding every VQE run of the run directory, creating it
    on first use with its artifacts stored under the run directory.

    Args:
        client (MlflowClient): A client of the run directory's tracking store.
        run_dir (str, optional): The run directory. Defaults to RUN_DIR.

    Returns:
        str: The experiment id.
    """

    experiment = client.get_experiment_by_name(EXPERIMENT_NAME)
    if experiment is not None:
        return experiment.experiment_id

    artifact_location = Path(os.path.abspath(run_dir), "artifacts").as_uri()

    try:
        return client.create_experiment(
            EXPERIMENT_NAME, artifact_location=artifact_location
        )
    except MlflowException:
        # created concurrently by another process
        experiment = client.get_experiment_by_name(EXPERIMENT_NAME)
        if experiment is None:
            raise

        return experiment.experiment_id


class Logger:
    """
    Logger class that manages all the data saved during a VQE run.
    Talks to mlflow through an explicit client and run id rather than the global active run,
    so several solvers can log at the same time from different threads.
    """

    def __init__(self: Self, run_name: str, run_dir: str = RUN_DIR) -> None:
        self.run_name = run_name
        self.run_dir = run_dir

        self.config_options: dict[str, Any] = {}
        self.logged_values: dict[str, list[Any]] = {}

        self.client = make_client(run_dir)
        self.run_id: str | None = None

    def start(self: Self) -> None:
        experiment_id = get_experiment_id(self.client, self.run_dir)

        run = self.client.create_run(experiment_id, run_name=self.run_name)
        self.run_id = run.info.run_id

    def end(self: Self, status: str = "FINISHED") -> None:
        if self.run_id is not None:
            self.client.set_terminated(self.run_id, status=status)
            self.run_id = None

    def _require_run(self: Self) -> str:
        if self.run_id is None:
            raise RuntimeError(f"Logger '{self.run_name}' has not been started.")

        return self.run_id

    def add_config_option(self: Self, name: str, config: Any) -> None:
        """
        Add a new config option of the run, for example the optimizer or the backend.
        """

        self.config_options[name] = config
        self.client.log_param(self._require_run(), name, config)

    def add_logged_value(
        self: Self, name: str, value: Any, t: int | None = None, file: bool = False
    ) -> None:
        """
        Adds a new logged value to the end of the list of the name.
        Examples of logged values include the energy and observable values.

        Args:
            self (Self): A reference to the current class instance.
            name (str): name of the logged value
            value (Any): actual value of the logged value
            t (int | None, optional): the timestamp of the value, defaults to next successive. Defaults to None.
            file (bool, optional). whether or not the data is more complicated than a scalar and needs to be placed in a file. Defaults to False.
        """

        run_id = self._require_run()

        if name not in self.logged_values:
            self.logged_values[name] = []

        self.logged_values[name].append(value)

        t = t if t is not None else len(self.logged_values[name])

        if not file:
            self.client.log_metric(run_id, name, float(value), step=t)
            return

        file_suffix = "txt"
        if isinstance(value, (list, dict)):
            file_suffix = "json"
        elif isinstance(value, Figure):
            file_suffix = "png"

        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp_path = os.path.join(tmp_dir, f"{t}.{file_suffix}")

            if file_suffix == "png":
                value.savefig(tmp_path)
            else:
                with open(tmp_path, "w") as f:
                    if file_suffix == "json":
                        json.dump(value, f)
                    else:
                        f.write(str(value))

            self.client.log_artifact(run_id, tmp_path, artifact_path=name)
