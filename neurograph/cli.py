"""
Command line interface: train a model file on CSV data or inspect it
"""

import logging
import sys

import click

from . import __version__
from .ai.neural_network import NeuralNetwork
from .ai.visualize import print_architecture_stats
from .data import DataLoader
from .exceptions import NeuroGraphError
from .train import train as run_training


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.version_option(version=__version__)
def cli():
    """neurograph - graph-backed neural networks"""


@cli.command("train")
@click.argument("model", type=click.Path())
@click.argument("train_file", type=click.Path())
@click.argument("test_file", type=click.Path())
@click.option("--epochs", "-e", default=4, show_default=True, type=click.IntRange(min=0), help="Number of epochs")
@click.option("--learning-rate", "-l", default=0.001, show_default=True, type=float, help="Learning rate")
@click.option("--seed", type=int, default=None, help="Seed for the initial weights")
@click.option("--save", "save_path", type=click.Path(), default=None, help="Write the trained model to this path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output with detailed logging")
def train_command(model, train_file, test_file, epochs, learning_rate, seed, save_path, verbose):
    """Train MODEL on TRAIN_FILE, reporting accuracy on TEST_FILE after every epoch."""
    _configure_logging(verbose)
    try:
        network = NeuralNetwork.load(model, learning_rate=learning_rate, seed=seed)
        train_data = DataLoader(train_file)
        test_data = DataLoader(test_file)

        run_training(
            network,
            train_data,
            test_data,
            epochs=epochs,
            learning_rate=learning_rate,
            on_epoch=lambda epoch, accuracy: click.echo(f"epoch: {epoch} accuracy: {accuracy}"),
        )
        click.echo(f"accuracy: {network.assess(test_data)}")

        if save_path:
            network.save(save_path)
            click.echo(f"Model saved to {save_path}")
    except NeuroGraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command("inspect")
@click.argument("model", type=click.Path())
@click.option("--dot", is_flag=True, help="Print the layers and DOT dump instead of statistics")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output with detailed logging")
def inspect_command(model, dot, verbose):
    """Show the architecture of MODEL."""
    _configure_logging(verbose)
    try:
        network = NeuralNetwork.load(model)
    except NeuroGraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if dot:
        click.echo(str(network))
    else:
        print_architecture_stats(network)


def main():
    cli()


if __name__ == "__main__":
    main()
