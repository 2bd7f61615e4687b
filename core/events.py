import itertools
from typing import Callable, Dict, List, Tuple

from blinker import Signal

from core.logging_config import get_logger

logger = get_logger("core.events")

Listener = Callable[["Event"], None]


class Event:
    """Base class for events passed through the ``EventDispatcher``"""

    propagation_stopped = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class CustomerWishlistLoaderCriteriaEvent(Event):
    """Dispatched before the wishlist products are searched.

    Listeners may add filters, sortings or associations to ``criteria``.
    """

    def __init__(self, criteria, context):
        self.criteria = criteria
        self.context = context


class CustomerWishlistProductListingResultEvent(Event):
    """Dispatched after the wishlist products were searched.

    Listeners may inspect, filter or replace ``result`` before it is returned.
    """

    def __init__(self, request, result, context):
        self.request = request
        self.result = result
        self.context = context


class EventDispatcher:
    """Synchronous in-process event dispatcher backed by one blinker signal per event type.

    Listeners run in descending priority, in registration order within the
    same priority. Listeners registered for a base class also receive its
    subclasses. Exceptions raised by a listener propagate to the dispatcher's
    caller.
    """

    def __init__(self):
        self._signals: Dict[type, Signal] = {}
        # (event type, listener id) -> (priority, registration sequence)
        self._order: Dict[Tuple[type, int], Tuple[int, int]] = {}
        self._sequence = itertools.count()

    def signal(self, event_type: type) -> Signal:
        if event_type not in self._signals:
            self._signals[event_type] = Signal(event_type.__name__)
        return self._signals[event_type]

    def add_listener(self, event_type: type, listener: Listener, priority: int = 0) -> None:
        self.signal(event_type).connect(listener, weak=False)
        self._order[(event_type, id(listener))] = (priority, next(self._sequence))

    def listen(self, event_type: type, priority: int = 0):
        """Decorator form of ``add_listener``"""
        def decorator(listener: Listener) -> Listener:
            self.add_listener(event_type, listener, priority)
            return listener
        return decorator

    def remove_listener(self, event_type: type, listener: Listener) -> None:
        if event_type in self._signals:
            self._signals[event_type].disconnect(listener)
        self._order.pop((event_type, id(listener)), None)

    def has_listeners(self, event_type: type) -> bool:
        return bool(self.get_listeners(event_type))

    def get_listeners(self, event_type: type) -> List[Listener]:
        entries = []
        for cls in event_type.__mro__:
            signal = self._signals.get(cls)
            if signal is None:
                continue
            for receiver in signal.receivers_for(event_type):
                entries.append((self._order[(cls, id(receiver))], receiver))
        # blinker keeps receivers unordered
        entries.sort(key=lambda entry: (-entry[0][0], entry[0][1]))
        return [entry[1] for entry in entries]

    def dispatch(self, event: Event) -> Event:
        listeners = self.get_listeners(type(event))
        logger.debug(f"Dispatching {type(event).__name__} to {len(listeners)} listener(s)")

        for listener in listeners:
            if event.propagation_stopped:
                logger.debug(f"Propagation of {type(event).__name__} stopped")
                break
            listener(event)

        return event


event_dispatcher = EventDispatcher()
