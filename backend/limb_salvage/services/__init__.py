from .limb_salvage_engine import LimbSalvageEngine, limb_salvage_engine
