from typing import Dict, Type

from emission_eval.criteria.asg_criterion import ASGCriterion
from emission_eval.criteria.criterion_base import CriterionBase
from emission_eval.criteria.ctc_criterion import CTCCriterion
from emission_eval.criteria.seq2seq_criterion import Seq2SeqCriterion

# Registry mapping criterion families to their decoding implementations
criterion_registry: Dict[str, Type[CriterionBase]] = {
    "ctc": CTCCriterion,
    "asg": ASGCriterion,
    "seq2seq": Seq2SeqCriterion,
}
