from typing import Iterable, Sequence

import numpy as np

from AgentKinetics.processes import AgentProc
from AgentKinetics.processes.rate import RATE_TOLERANCE, total_rate

# Upper bound on partial updates between full recomputations of the total
MAX_AGE_THRESHOLD = 1000000


class RateManager():
    """
    Maintains the rate vector and total rate for a fixed, ordinally indexed
    list of processes.

    After each event the total is updated incrementally from the processes
    whose rates changed. The total is recomputed from scratch when half or
    more of the processes changed, or after too many incremental updates,
    to keep floating point drift bounded.
    """

    def __init__(self, processes: Sequence[AgentProc]):
        self.processes = list(processes)
        self.rates = np.zeros(len(self.processes))

        self.age_threshold = min(MAX_AGE_THRESHOLD, 100 * len(self.processes))
        self.proc_threshold = len(self.processes) // 2

        self.rate_age = 0
        self._total = 0.0
        self.update_full()

    def update_full(self):
        self.rate_age = 0
        for proc in self.processes:
            self.rates[proc.index] = proc.rate
        self._total = total_rate(self.rates)

    def update_partial(self, processes: Iterable[AgentProc]):
        self.rate_age += 1
        for proc in processes:
            new_rate = proc.rate
            self._total += new_rate - self.rates[proc.index]
            self.rates[proc.index] = new_rate

    def update(self, event_proc: AgentProc, dependents: Sequence[AgentProc]):
        """
        Updates the total rate after an event. The rates of event_proc and
        its dependents must already have been refreshed.
        """
        if self.rate_age < self.age_threshold and len(dependents) < self.proc_threshold:
            self.update_partial([event_proc, *dependents])
        else:
            self.update_full()

    @property
    def total_rate(self) -> float:
        if not self.rates.any():
            # Drift can leave a residue of either sign once every rate is zero
            self._total = 0.0
            return 0.0
        if self._total <= RATE_TOLERANCE:
            self.update_full()
        return self._total

    @property
    def is_fixed_point(self) -> bool:
        return not self.rates.any()

    def select(self, u: float) -> AgentProc:
        """
        Chooses a process with probability proportional to its rate.

        Args:
            u (float): A uniform random number in [0, 1)
        """
        if self.is_fixed_point:
            raise RuntimeError('Cannot select a process when the total rate is zero')

        cumulative = np.cumsum(self.rates)
        index = int(np.searchsorted(cumulative, u * cumulative[-1], side='right'))
        index = min(index, len(self.processes) - 1)

        # Never pick a process that cannot fire
        while self.rates[index] == 0 and index > 0:
            index -= 1
        return self.processes[index]
