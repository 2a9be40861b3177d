import asyncio
import unittest

from fakes import BrokenStore, FakeAssistant, FakeClock, make_product, make_user

from storehub.db.database import MemoryStore
from storehub.db.models import SEED_ADMIN
from storehub.db.repositories import SESSION_KEY, USERS_KEY
from storehub.errors import AssistantError
from storehub.utils.navigation import Modal, ViewMode
from storehub.utils.state import (
    ASSISTANT_ERROR_TEXT,
    ASSISTANT_OFFLINE_TEXT,
    STORAGE_WARNING_TEXT,
    AppState,
)
from storehub.utils.toasts import ToastQueue


def make_state(store=None, assistant=None):
    clock = FakeClock()
    state = AppState(
        store if store is not None else MemoryStore(),
        toasts=ToastQueue(call_later=clock.call_later),
        assistant=assistant or FakeAssistant("Try the Valorant Account."),
    )
    state.initialize()
    return state


def severities(state):
    return [t.severity for t in state.toasts.entries]


class WiringTestCase(unittest.TestCase):
    def test_injected_collaborators_are_kept(self):
        clock = FakeClock()
        queue = ToastQueue(ttl=1.5, call_later=clock.call_later)
        assistant = FakeAssistant("x")
        state = AppState(MemoryStore(), toasts=queue, assistant=assistant)
        # an empty queue is falsy but still the one to use
        self.assertEqual(len(queue), 0)
        self.assertIs(state.toasts, queue)
        self.assertIs(state.assistant, assistant)
        self.assertEqual(state.toasts.ttl, 1.5)

    def test_dismiss_toasts(self):
        state = make_state()
        state.select_category("skins")
        state.select_category("games")
        self.assertEqual(state.dismiss_toasts(), 2)
        self.assertEqual(state.toasts.entries, [])
        self.assertEqual(state.dismiss_toasts(), 0)


class NavigationTestCase(unittest.TestCase):
    def test_initial_state(self):
        state = make_state()
        self.assertIs(state.nav.modal, Modal.NONE)
        self.assertIs(state.nav.view, ViewMode.HOME)
        self.assertEqual(state.nav.category, "all")

    def test_close_is_reachable_from_every_modal(self):
        state = make_state()
        state.login("admin", "0110")
        for modal in Modal:
            state.open_modal(modal)
            state.close_modal()
            self.assertIs(state.nav.modal, Modal.NONE)
            self.assertIsNone(state.nav.selected_product)
            self.assertIsNone(state.nav.editing_product)

    def test_select_category_and_search_drive_visible_products(self):
        state = make_state()
        state.login("admin", "0110")
        valorant = make_product("p1", "Valorant Account", "accounts")
        nitro = make_product("p2", "Discord Nitro", "discord")
        state.save_product(valorant)
        state.save_product(nitro)

        self.assertEqual(state.visible_products(), [valorant, nitro])
        state.select_category("discord")
        self.assertEqual(state.visible_products(), [nitro])
        self.assertEqual(state.toasts.entries[-1].severity, "info")

        state.select_category("all")
        state.set_search("VALO")
        self.assertEqual(state.visible_products(), [valorant])

        # edits show up on the next computation
        state.save_product(make_product("p1", "Valorant Ranked Account", "accounts"))
        self.assertEqual(state.visible_products()[0].name, "Valorant Ranked Account")

        with self.assertRaises(ValueError):
            state.select_category("weapons")

    def test_view_mode_transitions(self):
        state = make_state()
        state.nav.open_catalog()
        self.assertIs(state.nav.view, ViewMode.CATEGORY_LISTING)
        state.nav.go_home()
        self.assertIs(state.nav.view, ViewMode.HOME)


class CartActionsTestCase(unittest.TestCase):
    def test_add_to_cart_without_session_goes_to_login(self):
        state = make_state()
        self.assertFalse(state.add_to_cart(make_product()))
        self.assertEqual(state.cart.count(), 0)
        self.assertIs(state.nav.modal, Modal.LOGIN)
        self.assertEqual(severities(state), ["error"])

    def test_add_to_cart_with_session(self):
        state = make_state()
        state.login("admin", "0110")
        product = make_product()
        self.assertTrue(state.add_to_cart(product))
        self.assertTrue(state.add_to_cart(product))
        self.assertEqual(state.cart.count(), 2)
        self.assertEqual(state.toasts.entries[-1].severity, "success")

    def test_add_from_details_closes_modal(self):
        state = make_state()
        state.login("admin", "0110")
        product = make_product()
        state.show_details(product)
        self.assertIs(state.nav.modal, Modal.DETAILS)
        state.add_to_cart(state.nav.selected_product)
        self.assertIs(state.nav.modal, Modal.NONE)

    def test_checkout(self):
        state = make_state()
        self.assertFalse(state.checkout())
        state.login("admin", "0110")
        state.add_to_cart(make_product(price=49.90))
        state.add_to_cart(make_product("p2", price=10.00))
        state.open_modal(Modal.CART)
        self.assertTrue(state.remove_from_cart(1))
        self.assertFalse(state.remove_from_cart(4))
        self.assertTrue(state.checkout())
        self.assertEqual(state.cart.count(), 0)
        self.assertIs(state.nav.modal, Modal.NONE)
        self.assertIn("49.90", state.toasts.entries[-1].message)


class AccountActionsTestCase(unittest.TestCase):
    def test_login_success_and_failure(self):
        state = make_state()
        state.open_modal(Modal.LOGIN)
        self.assertFalse(state.login("admin", "wrong"))
        self.assertIs(state.nav.modal, Modal.LOGIN)
        self.assertIsNone(state.current_user)
        self.assertEqual(severities(state), ["error"])

        self.assertTrue(state.login("admin", "0110"))
        self.assertEqual(state.current_user, SEED_ADMIN)
        self.assertTrue(state.is_admin)
        self.assertIs(state.nav.modal, Modal.NONE)

    def test_register_logs_in(self):
        state = make_state()
        state.open_modal(Modal.REGISTER)
        jane = make_user()
        self.assertTrue(state.register(jane))
        self.assertEqual(state.current_user, jane)
        self.assertEqual(state.users.get_all(), [SEED_ADMIN, jane])
        self.assertIs(state.nav.modal, Modal.NONE)
        self.assertFalse(state.is_admin)

    def test_register_duplicate_email_changes_nothing(self):
        store = MemoryStore()
        state = make_state(store)
        state.register(make_user("u1"))
        state.logout()
        users_before = store.data[USERS_KEY]

        state.open_modal(Modal.REGISTER)
        self.assertFalse(state.register(make_user("u2", name="Impostor")))
        self.assertEqual(store.data[USERS_KEY], users_before)
        self.assertIsNone(state.current_user)
        self.assertNotIn(SESSION_KEY, store.data)
        self.assertIs(state.nav.modal, Modal.REGISTER)
        self.assertEqual(state.toasts.entries[-1].severity, "error")

    def test_update_profile_patches_users_and_session(self):
        store = MemoryStore()
        state = make_state(store)
        state.register(make_user())
        edited = make_user(name="Jane Doe", email="jd@example.com")
        state.open_profile()
        self.assertIs(state.nav.modal, Modal.PROFILE)

        self.assertEqual(state.update_profile(edited), edited)
        self.assertEqual(state.current_user, edited)
        self.assertEqual(state.users.find_by_id("u1"), edited)
        self.assertIs(state.nav.modal, Modal.NONE)

        # both keys agree after a restart
        reloaded = make_state(store)
        self.assertEqual(reloaded.current_user, edited)
        self.assertTrue(reloaded.login("jd@example.com", "pw"))

    def test_update_other_user_leaves_session(self):
        state = make_state()
        state.register(make_user("u1"))
        state.logout()
        state.login("admin", "0110")
        state.update_profile(make_user("u1", name="Renamed"))
        self.assertEqual(state.current_user, SEED_ADMIN)
        self.assertEqual(state.users.find_by_id("u1").name, "Renamed")

    def test_update_unknown_user_writes_nothing(self):
        state = make_state()
        state.login("admin", "0110")
        self.assertIsNone(state.update_profile(make_user("ghost")))
        self.assertEqual(state.current_user, SEED_ADMIN)
        self.assertEqual(len(state.users), 1)

    def test_profile_requires_session(self):
        state = make_state()
        state.open_modal(Modal.PROFILE)
        self.assertIs(state.nav.modal, Modal.LOGIN)

    def test_logout(self):
        store = MemoryStore()
        state = make_state(store)
        state.login("admin", "0110")
        self.assertIn(SESSION_KEY, store.data)
        state.logout()
        self.assertIsNone(state.current_user)
        self.assertNotIn(SESSION_KEY, store.data)

    def test_session_survives_restart(self):
        store = MemoryStore()
        make_state(store).login("admin", "0110")
        self.assertEqual(make_state(store).current_user, SEED_ADMIN)

    def test_stale_session_is_dropped_on_startup(self):
        store = MemoryStore()
        state = make_state(store)
        state.register(make_user())
        # users key lost, session key kept
        del store.data[USERS_KEY]
        self.assertIsNone(make_state(store).current_user)


class CatalogActionsTestCase(unittest.TestCase):
    def test_product_form_is_admin_only(self):
        state = make_state()
        self.assertFalse(state.open_product_form())
        self.assertIs(state.nav.modal, Modal.NONE)
        self.assertFalse(state.save_product(make_product()))
        self.assertEqual(len(state.products), 0)

        state.register(make_user())
        self.assertFalse(state.open_product_form())

    def test_admin_creates_and_edits(self):
        state = make_state()
        state.login("admin", "0110")
        self.assertTrue(state.open_product_form())
        self.assertIs(state.nav.modal, Modal.PRODUCT_FORM)
        self.assertIsNone(state.nav.editing_product)
        state.save_product(make_product())
        self.assertIs(state.nav.modal, Modal.NONE)

        product = state.products.find_by_id("p1")
        state.open_product_form(product)
        self.assertEqual(state.nav.editing_product, product)
        state.save_product(make_product(price=1.0))
        self.assertEqual(len(state.products), 1)
        self.assertEqual(state.products.get_all()[0].price, 1.0)


class StorageFailureTestCase(unittest.TestCase):
    def test_warns_once_and_keeps_working_in_memory(self):
        store = BrokenStore()
        state = make_state(store)
        state.login("admin", "0110")
        state.add_to_cart(make_product())
        state.add_to_cart(make_product())
        state.logout()

        warnings = [t for t in state.toasts.entries if t.message == STORAGE_WARNING_TEXT]
        self.assertEqual(len(warnings), 1)
        self.assertEqual(state.cart.count(), 2)
        self.assertGreater(store.writes, 3)

    def test_memory_only_store_at_startup_warns(self):
        store = MemoryStore()
        store.memory_only = True
        state = make_state(store)
        self.assertEqual(
            [t.message for t in state.toasts.entries], [STORAGE_WARNING_TEXT]
        )


class AssistantTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_reply_is_appended(self):
        assistant = FakeAssistant("Try the Valorant Account.")
        state = make_state(assistant=assistant)
        state.login("admin", "0110")
        state.save_product(make_product("p1", price=49.90, description="secret notes"))

        reply = await state.ask_assistant("  what should I buy?  ")
        self.assertEqual(reply.text, "Try the Valorant Account.")
        self.assertEqual(
            [(e.role, e.text) for e in state.chat],
            [("user", "what should I buy?"), ("assistant", "Try the Valorant Account.")],
        )
        query, summaries = assistant.calls[0]
        self.assertEqual(query, "what should I buy?")
        self.assertEqual(
            [(s.id, s.name, s.price, s.category) for s in summaries],
            [("p1", "Valorant Account", 49.90, "accounts")],
        )

    async def test_empty_reply_uses_offline_text(self):
        state = make_state(assistant=FakeAssistant(""))
        reply = await state.ask_assistant("hi")
        self.assertEqual(reply.text, ASSISTANT_OFFLINE_TEXT)
        self.assertFalse(reply.is_error)

    async def test_failure_becomes_one_error_entry(self):
        state = make_state(assistant=FakeAssistant(error=AssistantError("down")))
        reply = await state.ask_assistant("hi")
        self.assertTrue(reply.is_error)
        self.assertEqual(reply.text, ASSISTANT_ERROR_TEXT)
        self.assertEqual(len(state.chat), 2)

        state.assistant = FakeAssistant(error=RuntimeError("network"))
        await state.ask_assistant("again")
        self.assertEqual([e.is_error for e in state.chat], [False, True, False, True])

    async def test_blank_question_is_ignored(self):
        assistant = FakeAssistant("x")
        state = make_state(assistant=assistant)
        self.assertIsNone(await state.ask_assistant("   "))
        self.assertEqual(state.chat, [])
        self.assertEqual(assistant.calls, [])

    async def test_cancelled_call_still_gets_an_entry(self):
        started = asyncio.Event()

        class SlowAssistant:
            async def get_product_recommendations(self, query, products):
                started.set()
                await asyncio.sleep(60)
                return "too late"

        state = make_state(assistant=SlowAssistant())
        task = asyncio.create_task(state.ask_assistant("what to buy?"))
        await started.wait()
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertEqual(len(state.chat), 2)
        self.assertEqual(state.chat[0].text, "what to buy?")
        self.assertTrue(state.chat[1].is_error)

        # the next question is answered normally
        state.assistant = FakeAssistant("Try the Nitro.")
        reply = await state.ask_assistant("again?")
        self.assertEqual(reply.text, "Try the Nitro.")
        self.assertEqual(len(state.chat), 4)
