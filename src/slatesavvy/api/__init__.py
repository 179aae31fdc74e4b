"""REST API over one SlateSavvy session."""

from __future__ import annotations

from dataclasses import asdict
from typing import Literal, Optional

from fastapi import FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response

from slatesavvy.analysis import build_report, roster_status
from slatesavvy.api.schemas import (
    BeliefUploadResponse,
    LineupFilterSummary,
    LineupListResponse,
    LineupPlayerResponse,
    LineupResponse,
    LineupUploadResponse,
    PackLoadResponse,
    PlayerPoolResponse,
    ReportResponse,
    SlateStatsResponse,
)
from slatesavvy.errors import AmbiguousFormat, MalformedPipelinePayload, ReferencePackRequired
from slatesavvy.ingest import decode_payload
from slatesavvy.models import ContestInput, ContestState, Lineup
from slatesavvy.persistence import PreferenceStore, SqlitePreferenceStore
from slatesavvy.pool import (
    ALL_SETS,
    ContestExportError,
    FilterCriteria,
    assign_slots,
    export_lineups_to_csv,
    filter_lineups,
    lineup_sets,
)
from slatesavvy.session import (
    SessionContext,
    clear_beliefs,
    computed_lineups,
    contest_state,
    load_reference_pack_async,
    mapping_warnings,
    player_deltas,
    set_contest_input,
    slate_stats,
    upload_beliefs,
    upload_lineups,
)


SortField = Literal["projection", "salary", "ownership", "ceiling", "sim_roi", "sim_ev", "source"]


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ReferencePackRequired):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, AmbiguousFormat):
        return HTTPException(status_code=422, detail={"message": str(exc), "candidates": list(exc.candidates)})
    return HTTPException(status_code=400, detail=str(exc))


async def _read_text(upload: UploadFile) -> str:
    contents = await upload.read()
    if not contents:
        raise HTTPException(status_code=400, detail=f"{upload.filename or 'upload'} is empty")
    return decode_payload(contents)


def _lineup_to_response(lineup: Lineup) -> LineupResponse:
    assignment = assign_slots(lineup.players)
    slot_by_player = {player.player_id: slot for slot, player in assignment.slots.items() if player is not None}
    return LineupResponse(
        lineup_id=lineup.lineup_id,
        raw_label=lineup.raw_label,
        set_name=lineup.set_name,
        status=roster_status(lineup),
        complete=lineup.is_complete,
        player_ids=list(lineup.player_ids),
        players=[
            LineupPlayerResponse(
                player_id=player.player_id,
                name=player.name,
                team=player.team,
                positions=list(player.positions),
                salary=player.salary,
                projection=player.projection,
                ownership=player.ownership,
                ceiling=player.ceiling,
                slot=slot_by_player.get(player.player_id),
            )
            for player in lineup.players
        ],
        slots={slot: (player.player_id if player else None) for slot, player in assignment.slots.items()},
        missing_count=lineup.missing_count,
        salary=lineup.total_salary,
        projection=lineup.total_projection,
        ownership=lineup.total_ownership,
        ceiling=lineup.total_ceiling,
        sim_ev=lineup.sim_ev,
        sim_roi=lineup.sim_roi,
        cash_pct=lineup.cash_pct,
        top10_pct=lineup.top10_pct,
        signals=lineup.signals,
    )


def create_app(store: Optional[PreferenceStore] = None) -> FastAPI:
    app = FastAPI(title="SlateSavvy")
    session = SessionContext(store if store is not None else SqlitePreferenceStore())
    app.state.session = session

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/pack", response_model=PackLoadResponse)
    async def load_pack(
        pack: UploadFile = File(...),
        location: str | None = Form(None),
    ) -> PackLoadResponse:
        text = await _read_text(pack)
        try:
            result = await load_reference_pack_async(session, text, location=location or pack.filename)
        except MalformedPipelinePayload as exc:
            raise _http_error(exc) from exc
        if result is None:
            raise HTTPException(status_code=409, detail="A newer reference pack load replaced this one")
        return PackLoadResponse(
            version=result.snapshot.version,
            location=result.location,
            players=len(result.snapshot.players),
            lineups=result.lineup_count,
            lineup_source=result.lineup_source,
            contest_name=session.contest_input.contest_name,
            meta=dict(session.pack_meta),
            warnings=list(result.warnings),
        )

    @app.post("/beliefs", response_model=BeliefUploadResponse)
    async def load_beliefs(projections: UploadFile = File(...)) -> BeliefUploadResponse:
        text = await _read_text(projections)
        try:
            snapshot = upload_beliefs(session, text, name=projections.filename or "beliefs.csv")
        except ValueError as exc:
            raise _http_error(exc) from exc
        return BeliefUploadResponse(version=snapshot.version, name=snapshot.label, players=len(snapshot.players))

    @app.delete("/beliefs")
    async def remove_beliefs() -> dict[str, str]:
        clear_beliefs(session)
        return {"status": "cleared"}

    @app.post("/lineups", response_model=LineupUploadResponse)
    async def load_lineups(
        lineups: UploadFile = File(...),
        set_name: str = Form("uploaded"),
    ) -> LineupUploadResponse:
        text = await _read_text(lineups)
        try:
            result = upload_lineups(session, text, set_name=set_name)
        except (ReferencePackRequired, ValueError) as exc:
            raise _http_error(exc) from exc
        return LineupUploadResponse(
            format=result.format.value,
            lineup_count=result.lineup_count,
            incomplete_count=result.incomplete_count,
            warnings=mapping_warnings(session),
        )

    def _filtered(criteria: FilterCriteria):
        lineups = computed_lineups(session)
        return lineups, filter_lineups(lineups, criteria)

    @app.get("/lineups", response_model=LineupListResponse)
    async def list_lineups(
        set_name: str = Query(ALL_SETS),
        complete_only: bool = Query(False),
        viability: list[str] = Query([]),
        alignment: list[str] = Query([]),
        upside: list[str] = Query([]),
        min_projection: float | None = Query(None),
        max_projection: float | None = Query(None),
        min_salary: int | None = Query(None),
        max_salary: int | None = Query(None),
        max_ownership: float | None = Query(None),
        include_player: list[str] = Query([]),
        exclude_player: list[str] = Query([]),
        include_team: list[str] = Query([]),
        exclude_team: list[str] = Query([]),
        sort_by: SortField = Query("source"),
        sort_direction: Literal["asc", "desc"] = Query("desc"),
        limit: int | None = Query(None, ge=1),
    ) -> LineupListResponse:
        criteria = FilterCriteria(
            set_name=set_name,
            complete_only=complete_only,
            viability=tuple(viability),
            alignment=tuple(alignment),
            upside=tuple(upside),
            min_projection=min_projection,
            max_projection=max_projection,
            min_salary=min_salary,
            max_salary=max_salary,
            max_ownership=max_ownership,
            include_player_ids=tuple(include_player),
            exclude_player_ids=tuple(exclude_player),
            include_team_codes=tuple(code.upper() for code in include_team),
            exclude_team_codes=tuple(code.upper() for code in exclude_team),
            sort_by=sort_by,
            sort_direction=sort_direction,
            limit=limit,
        )
        lineups, result = _filtered(criteria)
        return LineupListResponse(
            sets=lineup_sets(lineups),
            summary=LineupFilterSummary(**asdict(result.summary)),
            lineups=[_lineup_to_response(lineup) for lineup in result.lineups],
        )

    @app.get("/lineups/export")
    async def export_lineups(
        set_name: str = Query(ALL_SETS),
        skip_incomplete: bool = Query(False),
    ):
        _, result = _filtered(FilterCriteria(set_name=set_name, complete_only=skip_incomplete))
        try:
            csv_text = export_lineups_to_csv(result.lineups)
        except ContestExportError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return Response(
            content=csv_text,
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=dk_upload.csv"},
        )

    @app.get("/players", response_model=PlayerPoolResponse)
    async def list_players() -> PlayerPoolResponse:
        snapshot = session.active_snapshot
        return PlayerPoolResponse(
            source=snapshot.source if snapshot is not None else "none",
            version=snapshot.version if snapshot is not None else None,
            belief_name=session.belief_name,
            games=list(session.games),
            players=list(session.active_pool),
            deltas=player_deltas(session),
        )

    @app.get("/contest", response_model=ContestState)
    async def get_contest() -> ContestState:
        return contest_state(session)

    @app.put("/contest", response_model=ContestState)
    async def put_contest(contest: ContestInput) -> ContestState:
        return set_contest_input(session, contest)

    @app.get("/report", response_model=ReportResponse)
    async def report() -> ReportResponse:
        state = contest_state(session)
        stats = slate_stats(session)
        return ReportResponse(
            report=build_report(computed_lineups(session), state),
            stats=SlateStatsResponse(
                total_players=stats.total_players,
                total_lineups=stats.total_lineups,
                missing_salary_count=stats.missing_salary_count,
                warnings=list(stats.warnings),
            ),
            contest=state,
        )

    return app


__all__ = ["create_app"]
