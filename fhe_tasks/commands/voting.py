"""EncryptedVoting tasks."""
from __future__ import annotations

import argparse
import logging

from ..contracts.facades import EncryptedVoting
from ..fhevm.decrypt import public_decrypt_value, setup_user_decrypt
from . import common
from .contract import add_deploy_arguments, deploy_and_record

logger = logging.getLogger(__name__)

DEFAULT_QUESTION = "Is writing FHE contracts easy?"


def cmd_deploy_encrypted_voting(args: argparse.Namespace) -> int:
    deploy_and_record(EncryptedVoting.CONTRACT_NAME, args, args.question)
    return 0


def cmd_cast_vote(args: argparse.Namespace) -> int:
    """Check the encrypted vote on chain, decrypt the verdict, and cast only a valid vote."""
    wallet = common.wallet(args)
    address = common.contract_address(args)
    config = common.testnet_config(args)
    w3 = common.connect(config)
    instance = common.fhevm_instance(args, config, w3)
    voting = common.attach(EncryptedVoting, w3, wallet, address)

    logger.info("Encrypting...")
    bundle = instance.create_encrypted_input(address, wallet.address).add8(args.vote).encrypt()
    logger.info("Calling isValidVote on contract")
    voting.is_valid_vote(bundle.handles[0], bundle.input_proof)
    logger.info("Requesting decryption of vote validity...")
    valid = setup_user_decrypt(instance, wallet, voting.vote_is_valid(), address)
    if not valid:
        logger.error("Vote is not valid; votes must be 0 or 1")
        return 1
    logger.info("Calling castVote on contract")
    voting.cast_vote(bundle.handles[0], bundle.input_proof)
    logger.info("Vote cast")
    return 0


def cmd_finalize_voting(args: argparse.Namespace) -> int:
    wallet = common.wallet(args)
    address = common.contract_address(args)
    config = common.testnet_config(args)
    w3 = common.connect(config)
    voting = common.attach(EncryptedVoting, w3, wallet, address)
    logger.info("Calling finalize on contract")
    voting.finalize()
    return 0


def cmd_voting_result(args: argparse.Namespace) -> int:
    address = common.contract_address(args)
    config = common.testnet_config(args)
    w3 = common.connect(config, "provider")
    instance = common.fhevm_instance(args, config, w3)
    voting = common.attach(EncryptedVoting, w3, None, address)
    logger.info("Question: %s", voting.question())
    logger.info("Total votes: %s", voting.total_votes())
    option, tally = voting.winning()
    logger.info("Requesting decryption...")
    logger.info("Winning option: %s", public_decrypt_value(instance, option))
    logger.info("Winning tally: %s", public_decrypt_value(instance, tally))
    return 0


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("task:deployEncryptedVoting", help="Deploy the EncryptedVoting contract")
    add_deploy_arguments(p)
    p.add_argument("--question", default=DEFAULT_QUESTION, help="Question put to the voters")
    p.set_defaults(func=cmd_deploy_encrypted_voting)

    p = sub.add_parser("task:castVote", help="Encrypt a vote (0 or 1), validate it and cast it")
    p.add_argument("--vote", type=int, required=True, help="Option to vote for")
    common.add_config_file(p)
    common.add_address_file(p)
    common.add_key_file(p)
    p.set_defaults(func=cmd_cast_vote)

    p = sub.add_parser("task:finalizeVoting", help="Compute the encrypted winner and publish it")
    common.add_config_file(p)
    common.add_address_file(p)
    common.add_key_file(p)
    p.set_defaults(func=cmd_finalize_voting)

    p = sub.add_parser("task:votingResult", help="Publicly decrypt the winning option and tally")
    common.add_config_file(p)
    common.add_address_file(p)
    p.set_defaults(func=cmd_voting_result)
