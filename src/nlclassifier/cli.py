"""nlclassifier command-line interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from . import __version__
from .assets import AssetContext
from .classifier import TextClassifier
from .config import Config, ConfigError, load_config
from .errors import NLClassifierError
from .logging import configure_logging

app = typer.Typer(help="Classify text with packaged NL classification models.")
LOGGER = logging.getLogger(__name__)


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config_path: Path | None


@app.callback()
def _nlclassifier(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to config (env NLCLASSIFIER_CONFIG or ~/.config/nlclassifier/config.yaml).",
        ),
    ] = None,
) -> None:
    """Capture global CLI options."""

    resolved = config.expanduser() if config else None
    ctx.obj = CLIState(config_path=resolved)


ModelOption = Annotated[
    str | None,
    typer.Option(
        "-m",
        "--model",
        help="Model file path, or asset name looked up in the configured asset_dirs.",
    ),
]


@app.command()
def classify(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(..., help="Text to classify.")],
    model: ModelOption = None,
) -> None:
    """Print the score of every category for TEXT."""

    if not text:
        typer.secho("Missing text to classify.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    config = _load_environment(_state(ctx))
    with _open_classifier(config, model) as classifier:
        try:
            result = classifier.classify(text)
        except NLClassifierError as exc:
            _classification_failure(exc)

    for index, category in enumerate(result):
        typer.echo(f"category[{index}]: '{category.label}' : '{category.score:.5f}'")


@app.command()
def info(
    ctx: typer.Context,
    model: ModelOption = None,
) -> None:
    """Describe a model: labels, vocabulary and sequence length."""

    config = _load_environment(_state(ctx))
    with _open_classifier(config, model) as classifier:
        loaded = classifier.handle.model
        seq_len = "dynamic" if loaded.max_seq_len is None else str(loaded.max_seq_len)
        typer.echo(f"→ nlclassifier {__version__}")
        typer.echo(f"Model: {classifier.handle.source}")
        typer.echo(f"Engine: {classifier.handle.engine.name}")
        typer.echo(f"Estimator: {type(loaded.estimator).__name__}")
        typer.echo(f"Labels ({len(loaded.labels)}): {', '.join(loaded.labels)}")
        typer.echo(f"Vocabulary size: {loaded.tokenizer.vocabulary_size}")
        typer.echo(f"Sequence length: {seq_len}")


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover - Typer always runs callback
        raise RuntimeError("CLI state not initialised")
    return state


def _load_environment(state: CLIState) -> Config:
    try:
        config = load_config(state.config_path)
    except ConfigError as exc:
        _config_failure(exc)
    configure_logging(config.logging, config.root_dir)
    return config


def _open_classifier(config: Config, model: str | None) -> TextClassifier:
    target = model or config.model
    if not target:
        typer.secho(
            "No model given; pass --model or set 'model' in the config.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1)

    try:
        candidate = Path(target).expanduser()
        if candidate.is_file():
            return TextClassifier.from_path(candidate)
        return TextClassifier.from_asset(AssetContext(config.asset_dirs), target)
    except NLClassifierError as exc:
        _classification_failure(exc)


def _classification_failure(exc: NLClassifierError) -> NoReturn:
    LOGGER.debug("Classifier failure", exc_info=True)
    typer.secho(f"Classification failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1) from exc


def _config_failure(exc: ConfigError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(2) from exc


__all__ = ["app"]
