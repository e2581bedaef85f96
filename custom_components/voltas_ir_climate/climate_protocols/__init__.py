"""Climate IR protocols."""
from .voltas import VoltasProtocol

PROTOCOL_MAP = {'voltas': VoltasProtocol}

def get_protocol(brand):
    if brand in PROTOCOL_MAP:
        return PROTOCOL_MAP[brand]()
    raise ValueError(f"Unsupported climate brand: {brand}")