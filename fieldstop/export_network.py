"""Write a person's relationship network to a standalone HTML file."""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

import kuzu

from . import crud
from .db import get_database
from .network_loader import LoadState, NetworkLoader
from .plotly_graph.plotly_render import build_network_figure, write_html

logger = logging.getLogger(__name__)


def export_network(conn: kuzu.Connection, person_id: str, out_path: Path) -> dict:
    """Build the network for person_id and write it as HTML. Returns the network.

    Raises ValueError for an unknown person and RuntimeError when the
    approaches cannot be loaded; nothing is written in either case.
    """
    person = crud.get_person(conn, person_id)
    if person is None:
        raise ValueError(f"Person not found: {person_id}")

    async def fetch_approaches():
        return crud.list_approaches(conn)

    loader = NetworkLoader(fetch_approaches)
    if asyncio.run(loader.load(person)) is not LoadState.READY:
        raise RuntimeError(loader.error)
    network = loader.network

    out_path.parent.mkdir(parents=True, exist_ok=True)
    write_html(build_network_figure(network), str(out_path))
    logger.info("Wrote network of %s (%d people, %d links) to %s",
                person_id, len(network["nodes"]), len(network["edges"]), out_path)
    return network


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("person_id", help="Id of the focal person")
    parser.add_argument("-o", "--output", default="network.html", help="Output HTML path")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    conn = kuzu.Connection(get_database())
    try:
        network = export_network(conn, args.person_id, Path(args.output))
    except (ValueError, RuntimeError) as e:
        raise SystemExit(str(e))
    print(f"{len(network['nodes'])} people, {len(network['edges'])} links -> {args.output}")


if __name__ == "__main__":
    main()
