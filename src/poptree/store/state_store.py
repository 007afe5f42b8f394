"""
StateStore — Упакованное хранилище состояний id

Одно 64-битное слово флагов на каждый id популяции (array typecode "Q").
Бит 0 — "in use", остальные биты зарезервированы под будущие флаги.
Поверх хранилища — случайная выборка одного/нескольких id из QuerySample
с учётом предпочтительного in-use состояния.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. При создании и после reset() все слова равны нулю
2. set_in_use(uid, ...) меняет только слово uid и только бит IN_USE
3. Выборка детерминирована при одинаковом seed и одинаковой истории вызовов
4. "Нечего выбирать" → EmptyPopulation (восстанавливаемое состояние)

Конкурентность: хранилище single-writer. Одновременные мутации или выборки
из одного экземпляра требуют внешней синхронизации.
"""

import ctypes
from array import array
from itertools import islice
from typing import Callable, Iterator, Optional

from poptree.core.domain.config import PopulationConfig, build_tree
from poptree.core.domain.sample import QuerySample
from poptree.core.domain.states import IN_USE_STATE_MASK, PreferredState
from poptree.core.domain.tree import PartitionTree
from poptree.core.errors import EmptyPopulation
from poptree.core.log import logger
from poptree.store.random_source import RandomSource, SeededRandom, weighted_choice


class StateStore:
    """
    Хранилище in-use состояний популяции PartitionTree.

    Пример:
        store = StateStore(seed=69_420, tree=tree)
        uid = store.random_id(orc_paladins, PreferredState.NOT_IN_USE)
        store.set_in_use(uid, True)
    """

    def __init__(
        self,
        seed: int,
        tree: PartitionTree,
        random_factory: Callable[[int], RandomSource] = SeededRandom,
    ):
        """
        Args:
            seed: Seed генератора
            tree: Дерево, размер популяции которого определяет размер хранилища
            random_factory: Фабрика RandomSource по seed
        """
        self._tree = tree
        self._states = array("Q", [0]) * tree.population_size
        self._random_factory = random_factory
        self._random = random_factory(seed)
        logger.debug("StateStore created: %d ids, seed=%d", tree.population_size, seed)

    @classmethod
    def from_config(
        cls, config: PopulationConfig, tree: Optional[PartitionTree] = None
    ) -> "StateStore":
        """Хранилище по конфигурации (дерево строится, если не передано)."""
        if tree is None:
            tree = build_tree(config)
        return cls(config.seed, tree)

    # -------------------------------------------------------------------------
    # Управление
    # -------------------------------------------------------------------------

    @property
    def tree(self) -> PartitionTree:
        return self._tree

    @property
    def population_size(self) -> int:
        return len(self._states)

    def reseed(self, seed: int) -> None:
        """Смена seed генератора; состояния id не затрагиваются."""
        self._random = self._random_factory(seed)
        logger.debug("StateStore reseeded: seed=%d", seed)

    def reset(self) -> None:
        """Обнуление всех слов состояния на месте, без второго буфера."""
        address, length = self._states.buffer_info()
        if length:
            ctypes.memset(address, 0, length * self._states.itemsize)
        logger.debug("StateStore states reset")

    # -------------------------------------------------------------------------
    # Битовые состояния
    # -------------------------------------------------------------------------

    def state_word(self, uid: int) -> int:
        """Сырое 64-битное слово флагов id."""
        if uid < 0:
            raise IndexError(f"uid must be non-negative, got {uid}")
        return self._states[uid]

    def is_in_use(self, uid: int) -> bool:
        return (self.state_word(uid) & IN_USE_STATE_MASK) != 0

    def set_in_use(self, uid: int, in_use: bool) -> None:
        word = self.state_word(uid)
        if in_use:
            self._states[uid] = word | IN_USE_STATE_MASK
        else:
            self._states[uid] = word & ~IN_USE_STATE_MASK

    # -------------------------------------------------------------------------
    # Выборка
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_population(sample: QuerySample) -> int:
        count = sample.count
        if count < 1:
            raise EmptyPopulation()
        return count

    def _matching_ids(self, sample: QuerySample, preferred_state: PreferredState) -> Iterator[int]:
        states = self._states
        for uid in sample.ids():
            if preferred_state.accepts((states[uid] & IN_USE_STATE_MASK) != 0):
                yield uid

    def random_id(
        self, sample: QuerySample, preferred_state: PreferredState = PreferredState.EITHER
    ) -> int:
        """
        Случайный id выборки с предпочтительным in-use состоянием.

        EITHER: выбор с весом по длине интервала, без сканирования состояний.
        IN_USE / NOT_IN_USE: подходящие id материализуются сканированием всех
        интервалов выборки, затем выбирается равномерно.

        Raises:
            EmptyPopulation: Выборка (или её подходящее подмножество) пуста
        """
        self._require_population(sample)

        if preferred_state is PreferredState.EITHER:
            return weighted_choice(self._random, sample.ranges)

        candidates = list(self._matching_ids(sample, preferred_state))
        if not candidates:
            raise EmptyPopulation()
        return candidates[self._random.uniform_int(len(candidates))]

    def random_ids(
        self,
        sample: QuerySample,
        preferred_state: PreferredState,
        count: int,
    ) -> list[int]:
        """
        До count различных случайных id выборки за один проход (без возвращения).

        Каждый подходящий id принимается с вероятностью needed / left, где
        left — число ещё не просмотренных подходящих id, needed — сколько ещё
        нужно выбрать. Результат идёт в порядке выборки и содержит ровно
        min(count, число подходящих id) элементов.

        Args:
            sample: Выборка популяции
            preferred_state: Предпочтительное in-use состояние
            count: Сколько id выбрать, 1 <= count <= sample.count

        Raises:
            ValueError: count < 1 или count > sample.count
            EmptyPopulation: Выборка пуста или ни один id не подошёл
        """
        available = self._require_population(sample)
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")
        if count > available:
            raise ValueError(
                f"Requested more ids than are available. Requested: {count}  Available: {available}"
            )

        if preferred_state is PreferredState.EITHER:
            left = available
        else:
            left = sum(1 for _ in self._matching_ids(sample, preferred_state))

        needed = count
        ids = []
        for uid in self._matching_ids(sample, preferred_state):
            if left < 1 or needed < 1:
                break
            chance = needed / left
            left -= 1
            if self._random.uniform_float01() < chance:
                needed -= 1
                ids.append(uid)

        if not ids:
            raise EmptyPopulation()
        return ids

    def first_unused(self, sample: QuerySample) -> int:
        """
        Первый (наименьший) не занятый id выборки.

        Raises:
            EmptyPopulation: Выборка пуста или все её id заняты
        """
        self._require_population(sample)
        for uid in self._matching_ids(sample, PreferredState.NOT_IN_USE):
            return uid
        raise EmptyPopulation()

    def first_in_use(self, sample: QuerySample) -> int:
        """
        Первый (наименьший) занятый id выборки.

        Raises:
            EmptyPopulation: Выборка пуста или ни один её id не занят
        """
        self._require_population(sample)
        for uid in self._matching_ids(sample, PreferredState.IN_USE):
            return uid
        raise EmptyPopulation()

    def unused_ids(self, sample: QuerySample, max_ids: int) -> list[int]:
        """
        До max_ids не занятых id выборки по возрастанию.

        Результат может быть короче max_ids, если свободных id меньше.

        Raises:
            EmptyPopulation: Выборка пуста
        """
        self._require_population(sample)
        if max_ids <= 0:
            return []
        return list(islice(self._matching_ids(sample, PreferredState.NOT_IN_USE), max_ids))

    def used_ids(self, sample: QuerySample, max_ids: int) -> list[int]:
        """
        До max_ids занятых id выборки по возрастанию.

        Raises:
            EmptyPopulation: Выборка пуста
        """
        self._require_population(sample)
        if max_ids <= 0:
            return []
        return list(islice(self._matching_ids(sample, PreferredState.IN_USE), max_ids))

    def __repr__(self) -> str:
        return f"StateStore(population_size={self.population_size})"


def build_population(config: PopulationConfig) -> tuple[PartitionTree, StateStore]:
    """Дерево и хранилище состояний по одной конфигурации."""
    tree = build_tree(config)
    return tree, StateStore.from_config(config, tree)
