"""
Jack VM Writer Tests
"""

import io
import threading

import pytest
from jackc.symbols import Kind
from jackc.vmwriter import VMWriter, LabelCounter, Segment, Command, segment_for


@pytest.fixture
def out():
    return io.StringIO()


class TestVMWriter:
    """Each call writes exactly one instruction line."""

    def test_instruction_formats(self, out):
        writer = VMWriter(out)
        writer.write_function('Main.main', 2)
        writer.write_push(Segment.CONST, 7)
        writer.write_pop(Segment.LOCAL, 1)
        writer.write_arithmetic(Command.ADD)
        writer.write_label('L')
        writer.write_goto('L')
        writer.write_if('L')
        writer.write_call('Math.multiply', 2)
        writer.write_return()

        assert out.getvalue().splitlines() == [
            'function Main.main 2',
            'push constant 7',
            'pop local 1',
            'add',
            'label L',
            'goto L',
            'if-goto L',
            'call Math.multiply 2',
            'return',
        ]

    @pytest.mark.parametrize("command,text", [
        (Command.ADD, 'add'), (Command.SUB, 'sub'), (Command.NEG, 'neg'),
        (Command.EQ, 'eq'), (Command.GT, 'gt'), (Command.LT, 'lt'),
        (Command.AND, 'and'), (Command.OR, 'or'), (Command.NOT, 'not'),
    ])
    def test_arithmetic_mnemonics(self, out, command, text):
        VMWriter(out).write_arithmetic(command)
        assert out.getvalue() == text + '\n'


class TestSegments:
    """Storage kind to segment mapping."""

    @pytest.mark.parametrize("kind,segment", [
        (Kind.STATIC, Segment.STATIC),
        (Kind.FIELD, Segment.THIS),
        (Kind.ARG, Segment.ARG),
        (Kind.VAR, Segment.LOCAL),
    ])
    def test_segment_for(self, kind, segment):
        assert segment_for(kind) is segment

    def test_segment_for_none(self):
        with pytest.raises(ValueError):
            segment_for(Kind.NONE)


class TestLabels:
    """Label numbering."""

    def test_labels_increment(self, out):
        writer = VMWriter(out)
        assert writer.new_label('IF') == 'IFLABEL0'
        assert writer.new_label('WHILE') == 'WHILELABEL1'
        assert writer.new_label() == 'LABEL2'

    def test_fresh_writers_are_independent(self):
        assert VMWriter(io.StringIO()).new_label() == 'LABEL0'
        assert VMWriter(io.StringIO()).new_label() == 'LABEL0'

    def test_shared_counter(self):
        labels = LabelCounter()
        first = VMWriter(io.StringIO(), labels)
        second = VMWriter(io.StringIO(), labels)
        assert first.new_label() == 'LABEL0'
        assert second.new_label() == 'LABEL1'
        assert first.new_label() == 'LABEL2'

    def test_counter_start(self):
        assert LabelCounter(start=100).next() == 100

    def test_counter_is_thread_safe(self):
        labels = LabelCounter()
        seen = []
        lock = threading.Lock()

        def take():
            taken = [labels.next() for _ in range(500)]
            with lock:
                seen.extend(taken)

        threads = [threading.Thread(target=take) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(seen) == list(range(4000))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
