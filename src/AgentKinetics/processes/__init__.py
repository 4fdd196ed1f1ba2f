from AgentKinetics.processes.rate import (validate_rate_constant, total_rate,
                                          sample_interval)
from AgentKinetics.processes.proc import (AgentProc, MassActionProc,
                                          BirthProc, DeathProc,
                                          TransitionProc, CappedProc)
