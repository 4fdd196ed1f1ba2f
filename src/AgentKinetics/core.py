import logging
import warnings
from typing import List, Optional, Sequence, Tuple

import numpy as np

from AgentKinetics.agents import Agent, validate_agent_list, validate_ordinal_list
from AgentKinetics.graph import ProcGraph
from AgentKinetics.population import AgentPopulation
from AgentKinetics.processes import AgentProc, sample_interval
from AgentKinetics.rate_manager import RateManager
from AgentKinetics.state import AgentState, StochEvent


class AgentSystem():
    """
    Stochastic simulation of a population of agents driven by a fixed set
    of processes, using the direct method of the stochastic simulation
    algorithm (Gillespie).

    Each step draws an exponential waiting time from the total rate,
    picks a process with probability proportional to its rate, applies
    its population update and refreshes the rates of the fired process
    and of every process whose rate depends on an affected agent.

    A system is single threaded. Independent replicas must each own their
    own population, processes and system.

    Args:
        agents (Sequence[Agent]): The agents, with agents[k].index == k
        population (AgentPopulation): The initial census. It is mutated in
            place as the simulation runs.
        processes (Sequence[AgentProc]): The processes, with
            processes[k].index == k
        seed (int, None): Seed for the random number generator
        start_time (float): The initial simulation time
    """

    def __init__(self,
                 agents: Sequence[Agent],
                 population: AgentPopulation,
                 processes: Sequence[AgentProc],
                 seed: Optional[int] = None,
                 start_time: float = 0.0):
        validate_agent_list(agents)
        validate_ordinal_list(processes, 'process')

        self.agents = list(agents)
        self.processes = list(processes)
        self.population = population
        self.seed = seed
        self._rng = None

        known = set(self.agents)
        for proc in self.processes:
            unknown = proc.agents() - known
            if unknown:
                raise ValueError(
                    f'Process {proc} refers to unregistered agents: {sorted(unknown, key=str)}')
        for agent in population.agents():
            if agent not in known:
                raise ValueError(f'Population contains unregistered agent {agent}')

        self.state = AgentState(population, start_time)

        for proc in self.processes:
            proc.update_rate(self.state)

        self.graph = ProcGraph.from_processes(self.processes)
        self.rate_manager = RateManager(self.processes)

        logging.info(f'Created agent system with {len(self.agents)} agents, '
                     f'{len(self.processes)} processes and {len(self.graph)} '
                     'rate dependencies')

    @property
    def rng(self) -> np.random.Generator:
        if self._rng is None:
            self._rng = np.random.default_rng(seed=self.seed)
        return self._rng

    @property
    def time(self) -> float:
        return self.state.time

    @property
    def step_count(self) -> int:
        return self.state.step_count

    @property
    def total_rate(self) -> float:
        return self.rate_manager.total_rate

    @property
    def is_fixed_point(self) -> bool:
        return self.rate_manager.is_fixed_point or self.total_rate == 0

    def rates(self) -> np.ndarray:
        return self.rate_manager.rates.copy()

    def count_agent(self, agent: Agent) -> int:
        return self.state.count_agent(agent)

    def next_event(self) -> Tuple[float, AgentProc]:
        """
        Draws the waiting time until the next event and the process that
        fires, without applying it.

        Returns:
            Tuple[float, AgentProc]: The waiting time and the process
        """
        total = self.total_rate
        if total == 0:
            raise RuntimeError('The system has reached a fixed point; no events can occur')

        interval = sample_interval(total, self.rng)
        proc = self.rate_manager.select(self.rng.random())
        return interval, proc

    def fire(self, proc: AgentProc, time: float) -> StochEvent:
        """
        Applies one occurrence of a process at the given (absolute) time and
        refreshes every rate that depends on it.
        """
        proc.update_population(self.population)
        event = self.state.record_event(proc, time)

        dependents = self.graph.dependents(proc)
        proc.update_rate(self.state)
        for dependent in dependents:
            dependent.update_rate(self.state)
        self.rate_manager.update(proc, list(dependents))

        logging.debug(f'{event}: {proc}')
        return event

    def step(self) -> StochEvent:
        interval, proc = self.next_event()
        return self.fire(proc, self.time + interval)

    def run(self,
            max_steps: Optional[int] = None,
            max_time: Optional[float] = None,
            recorder=None) -> List[StochEvent]:
        """
        Runs the simulation until it reaches a fixed point (total rate of
        zero) or exhausts one of its budgets.

        Args:
            max_steps (int, None): The maximum number of events to apply
            max_time (float, None): The simulated time at which to stop. The
                event that would cross this time is discarded and the clock
                is set to max_time.
            recorder: An optional object with a record(state) method, called
                after every event.

        Returns:
            List[StochEvent]: The events that were applied
        """
        if max_steps is None and max_time is None:
            warnings.warn('No step or time limit given; running until a fixed point')

        events = []
        while max_steps is None or len(events) < max_steps:
            if self.is_fixed_point:
                logging.info(f'Fixed point reached at time {self.time} '
                             f'after {self.step_count} events')
                break

            interval, proc = self.next_event()
            next_time = self.time + interval
            if max_time is not None and next_time > max_time:
                self.state.advance_time(max_time)
                break

            events.append(self.fire(proc, next_time))
            if recorder is not None:
                recorder.record(self.state)
        else:
            if max_time is not None and self.time < max_time:
                warnings.warn(f'Step limit of {max_steps} reached at time '
                              f'{self.time} before the time limit {max_time}')

        return events

    def populations(self) -> np.ndarray:
        return self.population.to_array(self.agents)

    def __str__(self) -> str:
        return (f'AgentSystem(time={self.time}, steps={self.step_count}, '
                f'total_rate={self.total_rate}, population={self.population})')

    def __repr__(self) -> str:
        return self.__str__()
