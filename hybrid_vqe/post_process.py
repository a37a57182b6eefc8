import json
import re
from functools import lru_cache, reduce
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from mlflow.entities import Run
from mlflow.store.entities import PagedList
from mlflow.tracking import MlflowClient
from typing_extensions import Any

from .deuteron import GROUND_STATE_ENERGY, TOLERANCE
from .optimizers import available_optimizers
from .utils.logger import get_experiment_id, make_client

RESULTS_DIR = "./results"


CAPITALIZATION_RULES = [
    ("lbfgs", "LBFGS"),
    ("l-bfgs", "L-BFGS"),
    ("cobyla", "COBYLA"),
    ("sgd", "SGD"),
    ("cnot", "CNOT"),
    ("vqe", "VQE"),
]


def _client() -> MlflowClient:
    return make_client()


@lru_cache(maxsize=None)
def get_runs() -> PagedList[Run]:
    """
    Every run logged by `VQE.execute` in the run store. Cached, call `get_runs.cache_clear()`
    to pick up newer runs.
    """

    client = _client()

    return client.search_runs(experiment_ids=[get_experiment_id(client)])


def _decode(value: str) -> Any:
    """
    Configs are logged as JSON, plain strings like the kernel name are not.
    """

    try:
        return json.loads(value)
    except ValueError:
        return value


@lru_cache(maxsize=None)
def get_run_params(run_id: str) -> dict[str, Any]:
    """
    Returns the config options of a run with the JSON logged ones, optimizer, backend and
    Hamiltonian, decoded back into dictionaries.

    Args:
        run_id (str): The id of the run.

    Returns:
        dict[str, Any]: The config options by name.
    """

    logged = _client().get_run(run_id).data.params

    return {name: _decode(value) for name, value in logged.items()}


@lru_cache(maxsize=None)
def get_run_metrics(run_id: str) -> dict[str, Any]:
    """
    Returns the full history of every metric of a run as (step, value) pairs ordered by step,
    plus "energy_error", the distance of each logged energy to the deuteron ground state energy.

    Args:
        run_id (str): The id of the run.

    Returns:
        dict[str, list[tuple[int, float]]]: The history of each metric by name.
    """

    client = _client()

    metrics = {
        name: sorted(
            (m.step, m.value) for m in client.get_metric_history(run_id, name)
        )
        for name in client.get_run(run_id).data.metrics
    }

    if "energy" in metrics:
        metrics["energy_error"] = [
            (step, abs(energy - GROUND_STATE_ENERGY))
            for step, energy in metrics["energy"]
        ]

    return metrics


def check_filtered(
    params: dict[str, Any], filter_fixed: dict[str, Any], filter_ignored: dict[str, Any]
) -> bool:
    """
    Whether a run is left out of a plot: it is when any fixed key differs from its required
    value or any ignored key takes one of the listed values.

    Args:
        params (dict[str, Any]): The decoded config options of the run.
        filter_fixed (dict[str, Any]): Dotted keys and the value each must have.
        filter_ignored (dict[str, list[Any]]): Dotted keys and the values that exclude a run.

    Returns:
        bool: True if the run is left out.
    """

    if any(get_nested_json(params, k) != v for k, v in filter_fixed.items()):
        return True

    return any(get_nested_json(params, k) in v for k, v in filter_ignored.items())


def get_nested_json(data: dict[str, Any], key: str) -> Any:
    """
    Looks up a dotted key like "optimizer.algorithm" in nested dictionaries, None when
    any part is missing.
    """

    return reduce(
        lambda x, y: x.get(y) if isinstance(x, dict) else None, key.split("."), data  # type: ignore
    )


def adjust_capitalization(s: str) -> str:
    """
    Turns a snake case name into a plot label, "cnot_count" becomes "CNOT Count".
    """

    s = " ".join(x.capitalize() for x in s.split("_"))

    for word, label in CAPITALIZATION_RULES:
        s = re.sub(rf"\b{re.escape(word)}\b", label, s, flags=re.IGNORECASE)

    return s


def compare_runs(
    *,
    group_by: str,
    y_parameter: str,
    title: str = "",
    x_axis_title: str = "",
    y_axis_title: str = "",
    filter_fixed: dict[str, Any] = {},
    filter_ignored: dict[str, list[Any]] = {},
    log_scale: bool = False,
) -> Figure | None:
    """
    Plots one metric against the VQE iteration for every run that passes the filters, one
    line per run, labelled by the value of a config option.

    Args:
        group_by (str): Dotted config key whose value labels each line, e.g. "optimizer._name".
        y_parameter (str): The metric to plot, e.g. "energy_error".
        title (str, optional): Title of the plot. Defaults to "".
        x_axis_title (str, optional): Label of the x axis. Defaults to "".
        y_axis_title (str, optional): Label of the y axis. Defaults to "".
        filter_fixed (dict[str, Any], optional): See `check_filtered`. Defaults to {}.
        filter_ignored (dict[str, list[Any]], optional): See `check_filtered`. Defaults to {}.
        log_scale (bool, optional): Whether the y axis is logarithmic. Defaults to False.

    Returns:
        Figure | None: The plot, None if no run passes the filters.
    """

    grouped_runs: dict[str, list[str]] = {}

    for run in get_runs():
        params = get_run_params(run.info.run_id)

        if check_filtered(params, filter_fixed, filter_ignored):
            continue

        if (label := get_nested_json(params, group_by)) is not None:
            grouped_runs.setdefault(str(label), []).append(run.info.run_id)

    if len(grouped_runs) == 0:
        return None

    fig, ax = plt.subplots(constrained_layout=True, figsize=(19.20, 10.80))

    for label, run_ids in sorted(grouped_runs.items()):
        for run_id in run_ids:
            history = get_run_metrics(run_id).get(y_parameter)
            if history is None:
                continue

            steps, values = zip(*history)
            ax.plot(steps, values, marker="o", label=adjust_capitalization(label))

    if y_parameter == "energy_error":  # plot the accepted tolerance
        ax.axhline(y=TOLERANCE, color="gray", linestyle="--", label="Tolerance")

    ax.set_title(title, fontsize=32)
    ax.set_xlabel(x_axis_title, fontsize=29)
    ax.set_ylabel(y_axis_title, fontsize=29)
    ax.tick_params(labelsize=24)
    ax.legend(fontsize=29, loc="upper right")

    if log_scale:
        ax.set_yscale("log")

    return fig


def save_figure(fig: Figure, directory: str) -> None:
    Path(directory).mkdir(parents=True, exist_ok=True)

    fig.savefig(f"{directory}/graph.png")
    plt.close(fig)


def main() -> None:
    kernels = ["ansatz", "ansatz_vec", "xasm_open_qasm_mixed_ansatz"]
    backend_shots = [0, 2**20]
    metrics = ["n_params", "circuit_depth", "cnot_count", "max_grad"]

    for kernel in kernels:
        for shots in backend_shots:
            kernel_dir = f"{RESULTS_DIR}/{kernel}/shots_{shots}"

            # graphs for optimizers
            if fig := compare_runs(
                group_by="optimizer._name",
                y_parameter="energy_error",
                title=f"Energy Error on {kernel}",
                x_axis_title="VQE Iterations",
                y_axis_title="Energy Error",
                filter_fixed={"kernel": kernel, "qiskit_backend.shots": shots},
                log_scale=True,
            ):
                save_figure(fig, f"{kernel_dir}/optimizers")

            # graphs for each scipy algorithm
            if fig := compare_runs(
                group_by="optimizer.algorithm",
                y_parameter="energy_error",
                title=f"Energy Error with Scipy on {kernel}",
                x_axis_title="VQE Iterations",
                y_axis_title="Energy Error",
                filter_fixed={
                    "kernel": kernel,
                    "qiskit_backend.shots": shots,
                    "optimizer._name": available_optimizers()["scipy"]._name(),
                },
                log_scale=True,
            ):
                save_figure(fig, f"{kernel_dir}/scipy")

            # graphs for gradient strategies
            if fig := compare_runs(
                group_by="gradient_strategy",
                y_parameter="energy",
                title=f"Energy by Gradient Strategy on {kernel}",
                x_axis_title="VQE Iterations",
                y_axis_title="Energy",
                filter_fixed={"kernel": kernel, "qiskit_backend.shots": shots},
            ):
                save_figure(fig, f"{kernel_dir}/gradient_strategy")

            # for each other metric
            for metric in metrics:
                if fig := compare_runs(
                    group_by="optimizer._name",
                    y_parameter=metric,
                    title=f"{adjust_capitalization(metric)} on {kernel}",
                    x_axis_title="VQE Iterations",
                    y_axis_title=adjust_capitalization(metric),
                    filter_fixed={"kernel": kernel, "qiskit_backend.shots": shots},
                ):
                    save_figure(fig, f"{kernel_dir}/{metric}")


if __name__ == "__main__":
    main()
