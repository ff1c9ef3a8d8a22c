"""
tests/test_sessions.py — Join-to-Create Session Room Tests
==========================================================
Entry creates-and-moves, exit deletes only when the live occupancy is 0,
and nothing on the voice path ever raises.
"""

from __future__ import annotations

import asyncio
import logging

import discord
from fakes import FakeMember, http_error, run_async

from rivalis.services.session_service import is_session_channel

VOICE = discord.ChannelType.voice
TEXT = discord.ChannelType.text


async def _layout(directory, guild):
    category = await directory.resolve_category(guild)
    trigger = await directory.resolve_trigger(guild, category)
    return category, trigger


async def _enter(sessions, member, trigger):
    before = member.join(trigger)
    await sessions.handle_transition(member, before, trigger)


async def _leave(sessions, member, after=None):
    before = member.join(after)
    await sessions.handle_transition(member, before, after)


def _rooms(guild, cfg):
    return [c for c in guild.channels if is_session_channel(c, cfg.session_prefix)]


class TestIsSessionChannel:
    def test_structural_check(self, cfg, guild):
        assert is_session_channel(guild.add_channel(f"{cfg.session_prefix}Ana", VOICE), cfg.session_prefix)
        assert not is_session_channel(guild.add_channel(f"{cfg.session_prefix}Ana", TEXT), cfg.session_prefix)
        assert not is_session_channel(guild.add_channel("Lobby", VOICE), cfg.session_prefix)
        assert not is_session_channel(None, cfg.session_prefix)


class TestEntry:
    def test_creates_room_and_moves_member(self, cfg, guild, directory, sessions):
        ana = FakeMember(guild, "Ana")

        async def scenario():
            category, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)
            return category

        category = run_async(scenario())
        (room,) = _rooms(guild, cfg)
        assert room.name == f"{cfg.session_prefix}Ana"
        assert room.category_id == category.id
        assert room.user_limit == cfg.session_user_limit
        assert ana.voice_channel_id == room.id

    def test_heals_missing_layout_on_first_join(self, cfg, guild, sessions):
        """Category and trigger are created on any event if absent."""
        ana = FakeMember(guild, "Ana")
        lobby = guild.add_channel("Lobby", VOICE)
        run_async(_enter(sessions, ana, lobby))
        assert len(guild.named(cfg.category_name)) == 1
        assert len(guild.named(cfg.trigger_channel_name)) == 1
        assert _rooms(guild, cfg) == []

    def test_recreates_deleted_category_and_trigger(self, cfg, guild, directory, sessions):
        ana = FakeMember(guild, "Ana")

        async def scenario():
            category, trigger = await _layout(directory, guild)
            guild.remove_channel(trigger)
            guild.remove_channel(category)
            lobby = guild.add_channel("Lobby", VOICE)
            await _enter(sessions, ana, lobby)

        run_async(scenario())
        assert len(guild.named(cfg.category_name)) == 1
        assert len(guild.named(cfg.trigger_channel_name)) == 1

    def test_repeated_entries_never_duplicate_layout(self, cfg, guild, directory, sessions):
        members = [FakeMember(guild, f"P{i}") for i in range(4)]

        async def scenario():
            _, trigger = await _layout(directory, guild)
            for m in members:
                await _enter(sessions, m, trigger)

        run_async(scenario())
        assert len(guild.named(cfg.category_name)) == 1
        assert len(guild.named(cfg.trigger_channel_name)) == 1
        assert len(_rooms(guild, cfg)) == 4

    def test_move_from_trigger_does_not_open_another_room(self, cfg, guild, directory, sessions):
        """The bot's own move fires trigger → room; that is not an entry."""
        ana = FakeMember(guild, "Ana")

        async def scenario():
            _, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)
            room = _rooms(guild, cfg)[0]
            await sessions.handle_transition(ana, trigger, room)

        run_async(scenario())
        assert len(_rooms(guild, cfg)) == 1

    def test_create_failure_is_logged_not_raised(self, cfg, guild, directory, sessions, caplog):
        ana = FakeMember(guild, "Ana")

        async def scenario():
            _, trigger = await _layout(directory, guild)
            guild.fail_create = http_error(discord.Forbidden, 403)
            await _enter(sessions, ana, trigger)
            return trigger

        with caplog.at_level(logging.ERROR):
            trigger = run_async(scenario())
        assert _rooms(guild, cfg) == []
        assert ana.voice_channel_id == trigger.id
        assert "Could not open session room" in caplog.text

    def test_move_failure_leaves_orphan_without_raising(self, cfg, guild, directory, sessions, caplog):
        ana = FakeMember(guild, "Ana")
        ana.fail_move = http_error(discord.HTTPException, 400)

        async def scenario():
            _, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)

        with caplog.at_level(logging.ERROR):
            run_async(scenario())
        (orphan,) = _rooms(guild, cfg)
        assert orphan.members == []
        assert "Could not open session room" in caplog.text


class TestExit:
    def test_last_leave_deletes_room(self, cfg, guild, directory, sessions):
        ana = FakeMember(guild, "Ana")

        async def scenario():
            _, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)
            await _leave(sessions, ana)

        run_async(scenario())
        assert _rooms(guild, cfg) == []

    def test_room_survives_while_occupied(self, cfg, guild, directory, sessions):
        ana, ben = FakeMember(guild, "Ana"), FakeMember(guild, "Ben")

        async def scenario():
            _, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)
            room = _rooms(guild, cfg)[0]
            ben.join(room)
            await _leave(sessions, ana)
            assert _rooms(guild, cfg) == [room]
            await _leave(sessions, ben)

        run_async(scenario())
        assert _rooms(guild, cfg) == []

    def test_leaving_to_another_channel_counts_as_exit(self, cfg, guild, directory, sessions):
        ana = FakeMember(guild, "Ana")
        lobby = guild.add_channel("Lobby", VOICE)

        async def scenario():
            _, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)
            await _leave(sessions, ana, after=lobby)

        run_async(scenario())
        assert _rooms(guild, cfg) == []
        assert ana.voice_channel_id == lobby.id

    def test_occupancy_is_read_at_decision_time(self, cfg, guild, directory, sessions):
        """Someone joining before the leave is processed keeps the room alive."""
        ana, ben = FakeMember(guild, "Ana"), FakeMember(guild, "Ben")

        async def scenario():
            _, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)
            room = _rooms(guild, cfg)[0]
            before = ana.join(None)
            ben.join(room)
            await sessions.handle_transition(ana, before, None)
            return room

        room = run_async(scenario())
        assert _rooms(guild, cfg) == [room]

    def test_non_session_channels_are_never_deleted(self, cfg, guild, sessions):
        ana = FakeMember(guild, "Ana")
        lobby = guild.add_channel("Lobby", VOICE)
        ana.join(lobby)
        run_async(_leave(sessions, ana))
        assert lobby in guild.channels

    def test_empty_trigger_is_not_deleted(self, cfg, guild, directory, sessions):
        ana = FakeMember(guild, "Ana")

        async def scenario():
            _, trigger = await _layout(directory, guild)
            ana.join(trigger)
            await _leave(sessions, ana)
            return trigger

        trigger = run_async(scenario())
        assert trigger in guild.channels

    def test_concurrent_last_leaves_delete_once_quietly(self, cfg, guild, directory, sessions, caplog):
        ana, ben = FakeMember(guild, "Ana"), FakeMember(guild, "Ben")

        async def scenario():
            _, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)
            room = _rooms(guild, cfg)[0]
            ben.join(room)
            ana.join(None)
            ben.join(None)
            await asyncio.gather(
                sessions.handle_transition(ana, room, None),
                sessions.handle_transition(ben, room, None),
            )

        with caplog.at_level(logging.ERROR):
            run_async(scenario())
        assert _rooms(guild, cfg) == []
        assert "Voice transition failed" not in caplog.text

    def test_already_deleted_room_is_ignored(self, cfg, guild, sessions):
        ana = FakeMember(guild, "Ana")
        room = guild.add_channel(f"{cfg.session_prefix}Ghost", VOICE)
        guild.remove_channel(room)
        run_async(sessions.handle_transition(ana, room, None))


class TestFailureIsolation:
    def test_layout_failure_is_swallowed(self, guild, sessions, caplog):
        ana = FakeMember(guild, "Ana")
        guild.fail_create = http_error(discord.Forbidden, 403)
        with caplog.at_level(logging.ERROR):
            run_async(sessions.handle_transition(ana, None, None))
        assert "Voice transition failed" in caplog.text

    def test_next_event_still_processed_after_failure(self, cfg, guild, directory, sessions):
        ana = FakeMember(guild, "Ana")

        async def scenario():
            guild.fail_create = http_error(discord.HTTPException, 500)
            await sessions.handle_transition(ana, None, None)
            guild.fail_create = None
            _, trigger = await _layout(directory, guild)
            await _enter(sessions, ana, trigger)

        run_async(scenario())
        assert len(_rooms(guild, cfg)) == 1
