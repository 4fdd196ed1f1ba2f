from typing import Iterable, Optional

from monty.json import MSONable

from AgentKinetics.agents import Agent
from AgentKinetics.population import AgentPopulation


class StochEvent(MSONable):
    """
    Record of one fired process.

    Args:
        step (int): The 1-based event number within the simulation
        time (float): The simulated time at which the event occurred
        proc_index (int): The ordinal index of the process that fired
    """

    def __init__(self, step: int, time: float, proc_index: int):
        self.step = step
        self.time = time
        self.proc_index = proc_index

    def __eq__(self, other) -> bool:
        if not isinstance(other, StochEvent):
            return NotImplemented
        return (self.step, self.time, self.proc_index) == (other.step, other.time,
                                                           other.proc_index)

    def __str__(self) -> str:
        return f'StochEvent(step={self.step}, time={self.time}, proc={self.proc_index})'

    def __repr__(self) -> str:
        return self.__str__()


class AgentState():
    """
    Read-only view of a running simulation: the current agent counts
    plus the last event. There is one state per simulation and it is
    updated in place after every event, so processes should always read
    counts from it rather than from a copy.
    """

    def __init__(self, population: AgentPopulation, time: float = 0.0):
        self._population = population
        self._time = time
        self._step_count = 0
        self._last_event: Optional[StochEvent] = None
        self._last_process = None

    def count_agent(self, agent: Agent) -> int:
        return self._population.count(agent)

    def count_agents(self, agents: Iterable[Agent]) -> int:
        return self._population.count_agents(agents)

    @property
    def time(self) -> float:
        return self._time

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def last_event(self) -> Optional[StochEvent]:
        return self._last_event

    @property
    def last_process(self):
        return self._last_process

    @property
    def population(self) -> AgentPopulation:
        """A snapshot copy of the current population."""
        return self._population.copy()

    def record_event(self, process, time: float) -> StochEvent:
        """
        Advances the clock and records a fired process. Only the owning
        simulation should call this, after the population update has been
        fully applied.
        """
        if time < self._time:
            raise RuntimeError(
                f'Simulation time cannot move backwards ({time} < {self._time})')
        self._step_count += 1
        self._time = time
        self._last_event = StochEvent(self._step_count, time, process.index)
        self._last_process = process
        return self._last_event

    def advance_time(self, time: float):
        if time < self._time:
            raise RuntimeError(
                f'Simulation time cannot move backwards ({time} < {self._time})')
        self._time = time
