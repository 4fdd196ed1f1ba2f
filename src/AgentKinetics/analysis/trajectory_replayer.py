from functools import lru_cache
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np

from AgentKinetics.inputs import SimulationConfig
from AgentKinetics.population import AgentPopulation
from AgentKinetics.state import StochEvent


class TrajectoryReplayer():
    """
    Reconstructs the population history of a recorded simulation by
    re-applying each fired process to the initial census.

    Args:
        config (SimulationConfig): The configuration the trajectory was
            generated from
        events: The events, either as StochEvent objects or as
            [step, time, proc_index] rows (see database.load_trajectory)
    """

    def __init__(self, config: SimulationConfig,
                 events: Sequence[Union[StochEvent, Sequence]]):
        self.config = config
        self.events = [
            event if isinstance(event, StochEvent) else StochEvent(*event)
            for event in events
        ]
        builder = config.get_builder()
        self.agents = builder.registry.agents
        self.processes = builder.processes

    @lru_cache(maxsize=1)
    def population_history(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Returns:
            Tuple[np.ndarray, np.ndarray]: The event times (starting with 0
                for the initial census) and the matching population counts,
                with one column per agent in ordinal order.
        """
        population = AgentPopulation({
            self.agents[self.config.agents.index(name)]: count
            for name, count in self.config.initial_population.items()
        })

        times = [0.0]
        counts = [population.to_array(self.agents)]
        for event in self.events:
            try:
                proc = self.processes[event.proc_index]
                proc.update_population(population)
            except (IndexError, ValueError) as e:
                raise RuntimeError(
                    f'Inconsistent trajectory at step {event.step}: {e}') from e
            times.append(event.time)
            counts.append(population.to_array(self.agents))

        return np.array(times), np.vstack(counts)

    def populations_at(self, times: Sequence[float]) -> np.ndarray:
        """
        Samples the population (a step function of time) on a time grid.
        """
        event_times, counts = self.population_history()
        idx = np.searchsorted(event_times, np.asarray(times), side='right') - 1
        return counts[np.clip(idx, 0, None)]

    def final_population(self) -> Dict[str, int]:
        _, counts = self.population_history()
        return {agent.name: int(count) for agent, count in zip(self.agents, counts[-1])}

    def event_statistics(self) -> Dict[int, int]:
        """
        Counts how many times each process fired.
        """
        statistics = {proc.index: 0 for proc in self.processes}
        for event in self.events:
            statistics[event.proc_index] = statistics.get(event.proc_index, 0) + 1
        return statistics


def average_populations(replayers: List[TrajectoryReplayer],
                        times: Sequence[float]) -> np.ndarray:
    """
    Averages the sampled populations of several replicas on a common grid.
    """
    return np.mean([replayer.populations_at(times) for replayer in replayers],
                   axis=0)
