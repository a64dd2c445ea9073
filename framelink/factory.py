from __future__ import annotations
import dataclasses
import logging
import random
from typing import Any, Optional, Union

from .codecs import Codecs
from .config import ServiceConfig
from .reactor import Scheduler
from .service import MessagingService
from .transport import ReplyCapability, Transport
from .transports.memory import MemoryTransport

def FrameLink(target_origin: Optional[str] = None,
              *,
              transport: Union[str, Transport, None] = None,
              frame: Union[ReplyCapability, str, None] = None,
              identity: Optional[str] = None,
              codec: Union[str, Any, None] = None,
              config: Optional[ServiceConfig] = None,
              logger: Optional[logging.Logger] = None,
              reactor: Optional[Scheduler] = None,
              rng: Optional[random.Random] = None,
              auto_start: bool = True,
              **transport_kwargs) -> MessagingService:
    """
    One-liner factory:
      FrameLink("http://frame.local", transport="memory", origin="http://host.local", frame=frame_window)
      FrameLink("frame-node", transport="zyre", name="host-node", frame="frame-node")
      FrameLink(config=load_config("host.yaml"), transport=my_transport)

    - target_origin: the single origin accepted from and posted to (overrides config)
    - transport: "memory" | "zyre" | Transport instance (overrides config)
    - frame: frame reference; makes this side the initiator. A string is resolved
      through transport.address_of, a MemoryTransport to its address
    - identity: fixed identity instead of a generated one
    - codec: "json" | "msgpack" | Codec instance, for transports built here
    - config: ServiceConfig supplying the defaults for everything above plus retry timing
    - auto_start: start the transport before the service subscribes to it
    - **transport_kwargs: passed to transport constructor
    """
    cfg = dataclasses.replace(
        config or ServiceConfig(),
        target_origin=target_origin or (config.target_origin if config else ""),
        identity=identity or (config.identity if config else None),
    ).validate()

    codec_obj = Codecs.resolve(codec or cfg.codec)

    # Resolve transport
    transport = transport if transport is not None else cfg.transport
    if isinstance(transport, str):
        tlabel = transport.lower()
        if tlabel == "memory":
            t = MemoryTransport(codec=codec_obj, **transport_kwargs)
        elif tlabel == "zyre":
            from .transports.zyre import ZyreTransport
            t = ZyreTransport(codec=codec_obj, **transport_kwargs)
        else:
            raise ValueError(f"Unknown transport label: {transport}")
    else:
        t = transport

    # Resolve frame reference
    if isinstance(frame, MemoryTransport):
        frame = frame.address
    elif isinstance(frame, str):
        address_of = getattr(t, "address_of", None)
        if address_of is None:
            raise ValueError(f"{type(t).__name__} cannot resolve frame {frame!r}")
        frame = address_of(frame)

    if auto_start:
        t.start()

    return MessagingService(
        cfg.target_origin, t, frame, cfg.identity, logger,
        reactor=reactor,
        retry_window_s=cfg.retry.window_s,
        retry_floor_s=cfg.retry.floor_s,
        rng=rng,
    )
