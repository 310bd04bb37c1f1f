"""
Command Line Interface for ar1-ssm.

Usage:
    ar1-ssm simulate --config CONFIG_PATH
    ar1-ssm fit --config CONFIG_PATH
    ar1-ssm evaluate --config CONFIG_PATH
"""

import argparse
import sys
from pathlib import Path

import pandas as pd

from ar1_ssm.utils.io import load_config, save_results
from ar1_ssm.utils.logging import setup_logging, get_logger


def _simulation_params(config):
    from ar1_ssm.models.params import AR1Params

    sim = config["simulation"]
    return AR1Params(a=sim["a"], q=sim["q"], r=sim["r"])


def _load_observations(config) -> pd.Series:
    data_path = config["data"]["path"]
    if data_path is None:
        raise ValueError("config key data.path is required")
    frame = pd.read_csv(data_path)
    column = config["data"]["column"]
    if column not in frame.columns:
        raise KeyError(f"Column '{column}' not found in {data_path}")
    return frame[column].astype(float)


def cmd_simulate(args):
    """Simulate a series from the configured parameters and write it to CSV."""
    from ar1_ssm.models.ar1 import AR1Model

    logger = get_logger(__name__)
    config = args.config_data

    params = _simulation_params(config)
    n_steps = int(config["simulation"]["n_steps"])
    logger.info(f"Simulating {n_steps} steps with {params.to_dict()}")

    x, y = AR1Model(params).simulate(n_steps, seed=config["seed"])

    output_dir = Path(config["output"]["dir"])
    output_dir.mkdir(parents=True, exist_ok=True)
    out_path = output_dir / "simulated.csv"
    pd.DataFrame({"x": x[0], "y": y[0]}).to_csv(out_path, index=False)

    logger.info(f"Simulated series saved to {out_path}")
    return out_path


def cmd_fit(args):
    """Fit the model to the configured data."""
    from ar1_ssm.estimation.mle import fit_model

    logger = get_logger(__name__)
    config = args.config_data

    y = _load_observations(config)
    model_cfg = config["model"]
    est_cfg = config["estimation"]

    result = fit_model(
        y,
        approach=est_cfg["approach"],
        variance_mode=model_cfg["variance_mode"],
        q=model_cfg["q"],
        r=model_cfg["r"],
        method=est_cfg["method"],
        maxiter=est_cfg["maxiter"],
        verbose=True,
    )

    output_dir = Path(config["output"]["dir"])
    output_dir.mkdir(parents=True, exist_ok=True)
    save_results(result, output_dir / "fit_result.pkl")

    logger.info("\n" + result.summary())
    logger.info(f"Model fit complete. Results saved to {output_dir}/fit_result.pkl")
    return result


def cmd_evaluate(args):
    """Evaluate the NLLs at the configured parameters."""
    from ar1_ssm.likelihood import (
        kalman_filter,
        laplace_marginal_nll,
        state_augmented_nll,
    )

    logger = get_logger(__name__)
    config = args.config_data

    y = _load_observations(config).dropna().values
    params = _simulation_params(config)

    marginal, x_filt, _, _, _ = kalman_filter(y, params)
    values = {
        "kalman_marginal": marginal,
        "laplace_marginal": laplace_marginal_nll(y, params.a, params.q, params.r),
        "joint_at_filtered": state_augmented_nll(y, params.a, params.q, params.r, x_filt),
    }

    for name, value in values.items():
        logger.info(f"  {name:<20} = {value:.6f}")
    return values


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="ar1-ssm",
        description="Likelihood evaluation and estimation for AR(1) state-space models",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sim_parser = subparsers.add_parser("simulate", help="Simulate a series")
    sim_parser.add_argument("--config", "-c", required=True, help="Path to config file")
    sim_parser.set_defaults(func=cmd_simulate)

    fit_parser = subparsers.add_parser("fit", help="Fit by maximum likelihood")
    fit_parser.add_argument("--config", "-c", required=True, help="Path to config file")
    fit_parser.set_defaults(func=cmd_fit)

    eval_parser = subparsers.add_parser("evaluate", help="Evaluate the NLLs")
    eval_parser.add_argument("--config", "-c", required=True, help="Path to config file")
    eval_parser.set_defaults(func=cmd_evaluate)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.config_data = load_config(args.config)
    log_cfg = args.config_data["logging"]
    setup_logging(level=log_cfg["level"], log_file=log_cfg.get("file"))

    return args.func(args)


if __name__ == "__main__":
    main()
