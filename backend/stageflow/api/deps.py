from typing import Annotated

from fastapi import Depends, Request

from stageflow.application.composition import SchedulingServices


def get_scheduling_services(request: Request) -> SchedulingServices:
    """Services composed at startup and stored on the application state."""
    return request.app.state.scheduling_services


SchedulingServicesDep = Annotated[SchedulingServices, Depends(get_scheduling_services)]
