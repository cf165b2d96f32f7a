import json
from functools import lru_cache

from pydantic import ValidationError

from framelink.bootstrap.config.settings import FrameLinkConfig
from framelink.core.ports.serializer import Serializer
from framelink.infra.msgpack_serializer import MsgPackSerializer


@lru_cache
def get_config() -> FrameLinkConfig:
    try:
        return FrameLinkConfig()
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


def get_serializer(use_msgpack: bool) -> Serializer | None:
    return MsgPackSerializer() if use_msgpack else None
