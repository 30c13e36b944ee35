from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from ..sim.core.clock import MonotonicClock
from ..sim.core.config import AppConfig
from ..sim.core.loop import TickLoop
from ..sim.core.rules import EntityType, as_entity_type
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    frame: int
    payload: str


class SimulationController:
    def __init__(self, config: AppConfig):
        self.config = config
        self.world = World(config.simulation, clock=MonotonicClock())
        self.loop = TickLoop(self.world, config.frame_interval, on_tick=self._on_tick)
        self.broadcast_interval = max(1, config.broadcast_interval)
        self.starts = 0
        self.clients: Set[WebSocket] = set()
        self._delivered: Dict[WebSocket, int] = {}
        self._backlog: deque[QueuedSnapshot] = deque(maxlen=max(1, config.snapshot_backlog))
        self._backlog_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self.loop.running

    async def start(
        self,
        counts: Dict[EntityType, int] | None = None,
        speed: float | None = None,
        seed: int | None = None,
    ) -> None:
        if seed is None:
            seed = self.config.simulation.seed + self.starts
        self.starts += 1
        await self.loop.start(counts=counts, speed=speed, seed=seed)
        await self._forget_backlog()

    async def reset(self) -> None:
        await self.loop.reset()
        await self._forget_backlog()
        await self.publish()

    async def connect(self, client: WebSocket) -> None:
        self.clients.add(client)
        self._delivered[client] = -1
        await self._deliver(client)

    def disconnect(self, client: WebSocket) -> None:
        self.clients.discard(client)
        self._delivered.pop(client, None)

    async def handle_message(self, text: str) -> None:
        try:
            message = json.loads(text)
        except json.JSONDecodeError:
            return
        if isinstance(message, dict) and message.get("type") == "ack":
            frame = message.get("frame")
            if isinstance(frame, int):
                await self.acknowledge(frame)

    async def acknowledge(self, frame: int) -> None:
        async with self._backlog_lock:
            while self._backlog and self._backlog[0].frame <= frame:
                self._backlog.popleft()

    async def backlog_frames(self) -> list[int]:
        async with self._backlog_lock:
            return [item.frame for item in self._backlog]

    async def publish(self) -> None:
        snapshot = self.world.snapshot()
        message = {"type": "snapshot", "frame": snapshot.frame, "payload": asdict(snapshot)}
        async with self._backlog_lock:
            self._backlog.append(QueuedSnapshot(frame=snapshot.frame, payload=json.dumps(message)))
        for client in list(self.clients):
            try:
                await self._deliver(client)
            except WebSocketDisconnect:
                self.disconnect(client)
        await self._drop_delivered()

    async def _on_tick(self, metrics: TickMetrics) -> None:
        if metrics.ended or metrics.frame % self.broadcast_interval == 0:
            await self.publish()

    async def _deliver(self, client: WebSocket) -> None:
        last_sent = self._delivered.get(client, -1)
        async with self._backlog_lock:
            pending = [item for item in self._backlog if item.frame > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            self._delivered[client] = item.frame

    async def _drop_delivered(self) -> None:
        if not self._delivered:
            return
        oldest = min(self._delivered.values())
        await self.acknowledge(oldest)

    async def _forget_backlog(self) -> None:
        async with self._backlog_lock:
            self._backlog.clear()
        for client in self._delivered:
            self._delivered[client] = -1


def _parse_start_payload(payload: Dict[str, Any], max_entities: int) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    raw_counts = payload.get("counts")
    if raw_counts is not None:
        if not isinstance(raw_counts, dict):
            raise HTTPException(status_code=422, detail="counts must be an object of type -> count")
        try:
            counts = {as_entity_type(key): int(value) for key, value in raw_counts.items()}
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        if any(value < 0 for value in counts.values()):
            raise HTTPException(status_code=422, detail="counts must be non-negative")
        if sum(counts.values()) > max_entities:
            raise HTTPException(status_code=422, detail=f"at most {max_entities} entities per match")
        options["counts"] = counts
    if payload.get("speed") is not None:
        try:
            speed = float(payload["speed"])
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=422, detail="speed must be a number") from exc
        if not 0.0 <= speed <= 50.0:
            raise HTTPException(status_code=422, detail="speed must be between 0 and 50")
        options["speed"] = speed
    if payload.get("seed") is not None:
        try:
            options["seed"] = int(payload["seed"])
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=422, detail="seed must be an integer") from exc
    return options


def create_app(config: AppConfig | None = None) -> FastAPI:
    controller = SimulationController(config or AppConfig())
    app = FastAPI(title="RPSLS Arena")
    app.state.controller = controller
    static_dir = Path(__file__).parent / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.get("/")
    async def index() -> FileResponse:
        return FileResponse(static_dir / "index.html")

    @app.get("/api/status")
    async def status() -> JSONResponse:
        world = controller.world
        return JSONResponse(
            {
                "running": controller.running,
                "state": world.state.value,
                "frame": world.frame_count,
                "population": len(world.entities),
                "counts": {entity_type.value: count for entity_type, count in world.counts.items()},
                "stats": world.stats_text,
                "winner": None if world.winner is None else world.winner.value,
                "metrics": None if world.metrics is None else asdict(world.metrics),
            }
        )

    @app.post("/api/control/start")
    async def start_simulation(payload: Dict[str, Any] | None = None) -> JSONResponse:
        options = _parse_start_payload(payload or {}, controller.config.max_entities)
        await controller.start(**options)
        logger.info("Start requested: %s", options)
        return JSONResponse({"running": controller.running, "state": controller.world.state.value})

    @app.post("/api/control/reset")
    async def reset_simulation() -> JSONResponse:
        await controller.reset()
        return JSONResponse({"running": controller.running, "state": controller.world.state.value})

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        await controller.connect(websocket)
        try:
            while True:
                await controller.handle_message(await websocket.receive_text())
        except WebSocketDisconnect:
            controller.disconnect(websocket)

    return app


app = create_app()


def main() -> None:
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="Serve the RPSLS arena over HTTP and websockets")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--config", type=Path, default=None, help="YAML app config")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = AppConfig.from_yaml(args.config) if args.config else AppConfig()
    uvicorn.run(create_app(config), host=args.host, port=args.port, log_level=args.log_level.lower())


__all__ = ["app", "create_app", "SimulationController"]
