from lingoflash.consts import VERSION

__version__ = VERSION
