from .dispatcher import Dispatcher
