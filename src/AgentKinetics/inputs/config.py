import logging
from typing import Dict, List, Optional, Union

from monty.json import MSONable
from monty.serialization import dumpfn, loadfn

from AgentKinetics.agents import AgentRegistry, OrdinalIndex
from AgentKinetics.core import AgentSystem
from AgentKinetics.population import AgentPopulation
from AgentKinetics.processes import (AgentProc, BirthProc, CappedProc,
                                     DeathProc, TransitionProc)

PROCESS_TYPES = ('birth', 'death', 'transition', 'capped')


class ModelBuilder():
    """
    Builds agents and processes with caller-owned ordinal counters, so that
    independent models (and tests) never share index state.
    """

    def __init__(self):
        self.registry = AgentRegistry(OrdinalIndex())
        self.proc_index = OrdinalIndex()
        self.processes: List[AgentProc] = []

    def add_agent(self, name: str):
        return self.registry.register(name)

    def agent(self, name: str):
        try:
            return self.registry.get(name)
        except KeyError:
            raise ValueError(f'Unknown agent: {name}')

    def birth(self, parent: str, child: str, rate_constant) -> BirthProc:
        return self.add_process({
            'type': 'birth',
            'parent': parent,
            'child': child,
            'rate_constant': rate_constant
        })

    def death(self, agent: str, rate_constant) -> DeathProc:
        return self.add_process({
            'type': 'death',
            'agent': agent,
            'rate_constant': rate_constant
        })

    def transition(self, reactant: str, product: str,
                   rate_constant) -> TransitionProc:
        return self.add_process({
            'type': 'transition',
            'reactant': reactant,
            'product': product,
            'rate_constant': rate_constant
        })

    def capped(self, base: dict, capped_agents: List[str],
               capacity: int) -> CappedProc:
        return self.add_process({
            'type': 'capped',
            'base': base,
            'capped_agents': capped_agents,
            'capacity': capacity
        })

    def make_process(self, spec: dict, index: int) -> AgentProc:
        """
        Creates a process from a dictionary specification, e.g.
        {'type': 'birth', 'parent': 'A', 'child': 'A', 'rate_constant': 2.0}

        Agents are referred to by name.
        """
        proc_type = spec.get('type')
        if proc_type not in PROCESS_TYPES:
            raise ValueError(
                f'Invalid process type {proc_type}. Expected one of {PROCESS_TYPES}')

        if proc_type == 'birth':
            return BirthProc(index, self.agent(spec['parent']),
                             self.agent(spec['child']), spec['rate_constant'])
        elif proc_type == 'death':
            return DeathProc(index, self.agent(spec['agent']),
                             spec['rate_constant'])
        elif proc_type == 'transition':
            return TransitionProc(index, self.agent(spec['reactant']),
                                  self.agent(spec['product']),
                                  spec['rate_constant'])
        else:
            # The wrapped process is never registered on its own
            base = self.make_process(spec['base'], index)
            return CappedProc(base,
                              [self.agent(name) for name in spec['capped_agents']],
                              spec['capacity'],
                              index=index)

    def add_process(self, spec: dict) -> AgentProc:
        # Build first so that an invalid process does not consume an index
        proc = self.make_process(spec, self.proc_index.peek())
        self.proc_index.next()
        self.processes.append(proc)
        return proc

    def build(self,
              initial_population: Optional[Dict[str, int]] = None,
              seed: Optional[int] = None) -> AgentSystem:
        population = AgentPopulation({
            self.agent(name): count
            for name, count in (initial_population or {}).items()
        })
        return AgentSystem(self.registry.agents,
                           population,
                           self.processes,
                           seed=seed)


class SimulationConfig(MSONable):
    """
    Explicit description of one agent model and how to run it.

    Args:
        agents (List[str]): The agent names. Ordinal indices are assigned
            in this order.
        processes (List[dict]): Process specifications. Each has a 'type'
            ('birth', 'death', 'transition' or 'capped') and refers to
            agents by name:

            {'type': 'birth', 'parent': 'A', 'child': 'A', 'rate_constant': 2.0}
            {'type': 'death', 'agent': 'A', 'rate_constant': 0.5}
            {'type': 'transition', 'reactant': 'A', 'product': 'B',
             'rate_constant': 1.0}
            {'type': 'capped', 'base': {...}, 'capped_agents': ['A'],
             'capacity': 100}
        initial_population (Dict[str, int]): The initial count of each
            agent. Agents that are not listed start at zero.
        seed (int, None): Seed for the random number generator.
        max_steps (int, None): The maximum number of events per run.
        max_time (float, None): The simulated time at which a run stops.
        record_populations (bool): Whether to store the population after
            every event when recording to a database.
    """

    def __init__(self,
                 agents: List[str],
                 processes: List[dict],
                 initial_population: Optional[Dict[str, int]] = None,
                 seed: Optional[int] = None,
                 max_steps: Optional[int] = None,
                 max_time: Optional[float] = None,
                 record_populations: bool = True):
        self.agents = list(agents)
        self.processes = list(processes)
        self.initial_population = dict(initial_population or {})
        self.seed = seed
        self.max_steps = max_steps
        self.max_time = max_time
        self.record_populations = record_populations

        if len(set(self.agents)) != len(self.agents):
            raise ValueError('Agent names must be unique')
        for name, count in self.initial_population.items():
            if name not in self.agents:
                raise ValueError(f'Initial population refers to unknown agent {name}')
            if count < 0:
                raise ValueError(f'Initial count of {name} must be non-negative')
        if max_steps is not None and max_steps < 0:
            raise ValueError('max_steps must be non-negative')
        if max_time is not None and max_time < 0:
            raise ValueError('max_time must be non-negative')

    @classmethod
    def from_file(cls, filename: str) -> 'SimulationConfig':
        """
        Loads a configuration from a json or yaml file. The file may hold
        either a serialized SimulationConfig or a plain dictionary of its
        arguments.
        """
        config = loadfn(filename)
        if isinstance(config, cls):
            return config
        return cls(**config)

    def to_file(self, filename: str):
        dumpfn(self, filename)

    def get_builder(self) -> ModelBuilder:
        builder = ModelBuilder()
        for name in self.agents:
            builder.add_agent(name)
        for spec in self.processes:
            builder.add_process(spec)
        return builder

    def build_system(self, seed: Union[int, None] = None) -> AgentSystem:
        """
        Builds a fresh system. Each call creates new agents, processes and
        population, so systems built from one config are independent.

        Args:
            seed (int, None): Overrides the seed of the config
        """
        seed = self.seed if seed is None else seed
        logging.info(f'Building agent system with seed {seed}')
        return self.get_builder().build(self.initial_population, seed=seed)
