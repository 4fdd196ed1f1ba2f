import warnings
from abc import ABCMeta, abstractmethod
from typing import Callable, FrozenSet, Iterable, Optional, Union

from monty.json import MSONable

from AgentKinetics.agents import Agent
from AgentKinetics.population import AgentPopulation
from AgentKinetics.processes.rate import validate_rate_constant
from AgentKinetics.state import AgentState

RateConstant = Union[float, Callable[[AgentState], float]]


class AgentProc(MSONable, metaclass=ABCMeta):
    """
    Base class for a stochastic event type acting on an agent population.

    A process declares the agents its rate depends on (depends()) and the
    agents whose counts change when it fires (affects()). Its
    instantaneous rate is cached: it is either supplied at construction
    or assigned by update_rate() before it is first read.

    Args:
        index (int): The ordinal index of the process, used to address its
            rate in a rate vector.
        initial_rate (float, None): A known initial rate. If None, the rate
            must be assigned by update_rate() before it is used.
    """

    def __init__(self, index: int, initial_rate: Optional[float] = None):
        if index < 0:
            raise ValueError('Process index must be non-negative')
        self.index = index
        self.initial_rate = None if initial_rate is None else validate_rate_constant(
            initial_rate)
        self._rate = self.initial_rate

    @abstractmethod
    def depends(self) -> FrozenSet[Agent]:
        """The agents whose counts determine the rate of this process."""

    @abstractmethod
    def affects(self) -> FrozenSet[Agent]:
        """The agents whose counts change when this process fires."""

    @abstractmethod
    def compute_rate(self, state: AgentState) -> float:
        """
        Computes the instantaneous rate of this process for the current
        simulation state.
        """

    @abstractmethod
    def update_population(self, population: AgentPopulation):
        """Applies the effect of one occurrence of this process."""

    def agents(self) -> FrozenSet[Agent]:
        return self.depends() | self.affects()

    @property
    def has_rate(self) -> bool:
        return self._rate is not None

    @property
    def rate(self) -> float:
        if self._rate is None:
            raise RuntimeError(
                f'The rate of process {self.index} has not been assigned')
        return self._rate

    def update_rate(self, state: AgentState) -> float:
        """
        Recomputes and caches the rate of this process. Must be called after
        every event that changes any agent in depends().
        """
        self._rate = validate_rate_constant(self.compute_rate(state))
        return self._rate


class MassActionProc(AgentProc):
    """
    A process with first-order mass-action kinetics:
    rate = rate_constant * count(reactant).

    The rate constant may be a number or a function of the simulation
    state, allowing density- or time-dependent rates. Processes with a
    callable rate constant cannot be serialized.
    """

    def __init__(self,
                 index: int,
                 reactant: Agent,
                 rate_constant: RateConstant,
                 initial_rate: Optional[float] = None):
        super().__init__(index, initial_rate)
        self.reactant = reactant
        if callable(rate_constant):
            self.rate_constant = rate_constant
        else:
            self.rate_constant = validate_rate_constant(rate_constant)
            if self.rate_constant == 0:
                warnings.warn(
                    f'Process {index} has a zero rate constant and will never fire')

    def get_rate_constant(self, state: AgentState) -> float:
        if callable(self.rate_constant):
            return validate_rate_constant(self.rate_constant(state))
        return self.rate_constant

    def depends(self) -> FrozenSet[Agent]:
        return frozenset([self.reactant])

    def compute_rate(self, state: AgentState) -> float:
        return self.get_rate_constant(state) * state.count_agent(self.reactant)


class BirthProc(MassActionProc):
    """
    A parent agent gives birth to a child agent: count(child) += 1.
    The parent and child may be the same agent (self-replication).

    Args:
        index (int): The ordinal index of the process
        parent (Agent): The agent whose count sets the rate
        child (Agent): The agent created when the process fires
        rate_constant (float, Callable): The per-parent birth rate
        initial_rate (float, None): A known initial rate
    """

    def __init__(self,
                 index: int,
                 parent: Agent,
                 child: Agent,
                 rate_constant: RateConstant,
                 initial_rate: Optional[float] = None):
        super().__init__(index, parent, rate_constant, initial_rate)
        self.parent = parent
        self.child = child

    def affects(self) -> FrozenSet[Agent]:
        return frozenset([self.child])

    def update_population(self, population: AgentPopulation):
        population.add(self.child)

    def __str__(self) -> str:
        return f'Birth[{self.index}]: {self.parent.name} -> {self.parent.name} + {self.child.name}'

    def __repr__(self) -> str:
        return self.__str__()


class DeathProc(MassActionProc):
    """
    One instance of an agent dies: count(agent) -= 1.
    """

    def __init__(self,
                 index: int,
                 agent: Agent,
                 rate_constant: RateConstant,
                 initial_rate: Optional[float] = None):
        super().__init__(index, agent, rate_constant, initial_rate)
        self.agent = agent

    def affects(self) -> FrozenSet[Agent]:
        return frozenset([self.agent])

    def update_population(self, population: AgentPopulation):
        population.remove(self.agent)

    def __str__(self) -> str:
        return f'Death[{self.index}]: {self.agent.name} -> 0'

    def __repr__(self) -> str:
        return self.__str__()


class TransitionProc(MassActionProc):
    """
    One instance of the reactant turns into the product:
    count(reactant) -= 1, count(product) += 1.

    Both agents change when the process fires, so affects() contains
    both of them.
    """

    def __init__(self,
                 index: int,
                 reactant: Agent,
                 product: Agent,
                 rate_constant: RateConstant,
                 initial_rate: Optional[float] = None):
        if reactant == product:
            raise ValueError(
                f'Transition reactant and product must be distinct, got {reactant}')
        super().__init__(index, reactant, rate_constant, initial_rate)
        self.product = product

    def affects(self) -> FrozenSet[Agent]:
        return frozenset([self.reactant, self.product])

    def update_population(self, population: AgentPopulation):
        population.remove(self.reactant)
        population.add(self.product)

    def __str__(self) -> str:
        return f'Transition[{self.index}]: {self.reactant.name} -> {self.product.name}'

    def __repr__(self) -> str:
        return self.__str__()


class CappedProc(AgentProc):
    """
    Wraps a base process with a hard ceiling on the total population of a
    subset of agents. The rate is the base rate while the capped agents
    total strictly less than the capacity, and exactly zero at or above
    it.

    The capped process takes the place of its base process in a system and
    shares its ordinal index unless another index is given.

    Args:
        base (AgentProc): The process being limited
        capped_agents (Iterable[Agent]): The agents counted against the
            capacity
        capacity (int): The maximum total population of the capped agents.
            Must be at least 1.
        index (int, None): The ordinal index of this process. Defaults to
            the index of the base process.
    """

    def __init__(self,
                 base: AgentProc,
                 capped_agents: Iterable[Agent],
                 capacity: int,
                 index: Optional[int] = None,
                 initial_rate: Optional[float] = None):
        if int(capacity) != capacity or capacity < 1:
            raise ValueError(f'Capacity must be a positive integer, got {capacity}')
        capped_agents = list(dict.fromkeys(capped_agents))
        if len(capped_agents) == 0:
            raise ValueError('At least one capped agent is required')

        super().__init__(base.index if index is None else index, initial_rate)
        self.base = base
        self.capped_agents = capped_agents
        self.capacity = int(capacity)

    def is_capped(self, state: AgentState) -> bool:
        return state.count_agents(self.capped_agents) >= self.capacity

    def depends(self) -> FrozenSet[Agent]:
        # The capped agents are rate inputs through the capacity check
        return self.base.depends() | frozenset(self.capped_agents)

    def affects(self) -> FrozenSet[Agent]:
        return self.base.affects()

    def compute_rate(self, state: AgentState) -> float:
        if self.is_capped(state):
            return 0.0
        return self.base.compute_rate(state)

    def update_population(self, population: AgentPopulation):
        self.base.update_population(population)

    def __str__(self) -> str:
        names = ', '.join(agent.name for agent in self.capped_agents)
        return f'Capped[{self.index}]: ({self.base}) while {names} < {self.capacity}'

    def __repr__(self) -> str:
        return self.__str__()
