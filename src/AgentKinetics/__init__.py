from AgentKinetics.agents import Agent, AgentRegistry, OrdinalIndex
from AgentKinetics.population import AgentPopulation
from AgentKinetics.processes import (BirthProc, DeathProc, TransitionProc,
                                     CappedProc)
from AgentKinetics.state import AgentState, StochEvent
from AgentKinetics.core import AgentSystem
