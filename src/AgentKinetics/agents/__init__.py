from AgentKinetics.agents.agent import (Agent, AgentRegistry, OrdinalIndex,
                                        validate_agent_list,
                                        validate_ordinal_list)
