"""
Mapper for converting between stage domain entities and SQL entities.
"""

from stageflow.domain.scheduling.entities.stage import CapacityProfile as DomainProfile
from stageflow.domain.scheduling.entities.stage import Stage as DomainStage
from stageflow.infrastructure.database.sqlmodel_entities import (
    CapacityProfile as SQLProfile,
)
from stageflow.infrastructure.database.sqlmodel_entities import Stage as SQLStage


class StageMapper:
    """Maps stages and their capacity profiles."""

    @staticmethod
    def domain_to_sql(domain_stage: DomainStage) -> SQLStage:
        return SQLStage(
            id=domain_stage.id,
            name=domain_stage.name,
            order_index=domain_stage.order_index,
            daily_capacity_hours=domain_stage.daily_capacity_hours,
            working_start=domain_stage.working_start,
            working_end=domain_stage.working_end,
            max_parallel_jobs=domain_stage.max_parallel_jobs,
            is_active=domain_stage.is_active,
        )

    @staticmethod
    def sql_to_domain(sql_stage: SQLStage) -> DomainStage:
        return DomainStage(
            id=sql_stage.id,
            name=sql_stage.name,
            order_index=sql_stage.order_index,
            daily_capacity_hours=sql_stage.daily_capacity_hours,
            working_start=sql_stage.working_start,
            working_end=sql_stage.working_end,
            max_parallel_jobs=sql_stage.max_parallel_jobs,
            is_active=sql_stage.is_active,
        )

    @staticmethod
    def profile_to_sql(domain_profile: DomainProfile) -> SQLProfile:
        return SQLProfile(
            stage_id=domain_profile.stage_id,
            daily_capacity_hours=domain_profile.daily_capacity_hours,
            efficiency_factor=domain_profile.efficiency_factor,
            max_parallel_jobs=domain_profile.max_parallel_jobs,
            is_bottleneck=domain_profile.is_bottleneck,
        )

    @staticmethod
    def profile_to_domain(sql_profile: SQLProfile) -> DomainProfile:
        return DomainProfile(
            stage_id=sql_profile.stage_id,
            daily_capacity_hours=sql_profile.daily_capacity_hours,
            efficiency_factor=sql_profile.efficiency_factor,
            max_parallel_jobs=sql_profile.max_parallel_jobs,
            is_bottleneck=sql_profile.is_bottleneck,
        )
